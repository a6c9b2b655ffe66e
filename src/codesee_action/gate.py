from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, Optional

from .constants import UNSAFE_LANGUAGES
from .errors import MalformedEventPayload
from .events import is_forked_pull_request_event
from .models import GateDecision

if TYPE_CHECKING:
    from .config import RunConfig


def decide_disabled_capabilities(
    config: "RunConfig",
    event_name: Optional[str],
    payload: Optional[Mapping[str, Any]],
) -> GateDecision:
    """
    Decide which analyzers must not run for this event.

    Analyzers in UNSAFE_LANGUAGES execute repository code. On a forked pull
    request they are disabled whenever the API token is present, so untrusted
    code never runs next to the credential. A pull request whose fork status
    cannot be read from the payload is treated as forked.

    Returns:
        GateDecision with reason one of:
        all_capabilities_allowed | fork_without_credential | fork_with_credential
    """
    try:
        forked = is_forked_pull_request_event(event_name, payload)
    except MalformedEventPayload:
        forked = True

    if not forked:
        return GateDecision(frozenset(), "all_capabilities_allowed")

    if not config.has_credential():
        return GateDecision(frozenset(), "fork_without_credential")

    risky = frozenset(lang for lang in UNSAFE_LANGUAGES if config.language_enabled(lang))
    return GateDecision(risky, "fork_with_credential")
