"""Pull request event classification."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from .constants import PULL_REQUEST_EVENTS
from .errors import MalformedEventPayload
from .models import PullRequestRef


def is_pull_request_event(name: Optional[str]) -> bool:
    """`pull_request_target` is the secret-safe event for forks; `pull_request` is kept for older workflows."""
    return name in PULL_REQUEST_EVENTS


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _pull_request(payload: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    pr = payload.get("pull_request") if isinstance(payload, Mapping) else None
    if not isinstance(pr, Mapping):
        raise MalformedEventPayload("Pull request event payload has no 'pull_request' record")
    return pr


def is_forked_pull_request_event(name: Optional[str], payload: Optional[Mapping[str, Any]]) -> bool:
    """
    True iff `name` is a pull request event whose head repository is a fork.

    Raises MalformedEventPayload when a pull request event lacks the head
    repository record. Callers decide how to treat an undeterminable result.
    """
    if not is_pull_request_event(name):
        return False

    pr = _pull_request(payload)
    head_repo = _mapping(pr.get("head")).get("repo")
    if not isinstance(head_repo, Mapping):
        raise MalformedEventPayload("Pull request event payload has no 'pull_request.head.repo' record")

    if head_repo.get("fork") is True:
        return True

    head_name = head_repo.get("full_name")
    base_name = _mapping(_mapping(pr.get("base")).get("repo")).get("full_name")
    return bool(head_name and base_name and head_name != base_name)


def _coerce_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def pull_request_ref(
    payload: Optional[Mapping[str, Any]],
    base_ref: Optional[str] = None,
) -> PullRequestRef:
    """
    Base ref, base sha and number of the pull request in `payload`.

    `base_ref` is the runner-resolved base branch; the payload's
    `pull_request.base.ref` is used when it is absent.
    """
    pr = _pull_request(payload)
    base = _mapping(pr.get("base"))

    resolved_base_ref = base_ref or base.get("ref")
    base_sha = base.get("sha")
    number = _coerce_int(pr.get("number"))
    if number is None:
        number = _coerce_int(_mapping(payload).get("number"))

    missing = [
        label
        for label, value in (
            ("base ref", resolved_base_ref),
            ("pull_request.base.sha", base_sha),
            ("pull request number", number),
        )
        if not value and value != 0
    ]
    if missing:
        raise MalformedEventPayload(f"Pull request event payload is missing: {', '.join(missing)}")

    return PullRequestRef(base_ref=str(resolved_base_ref), base_sha=str(base_sha), number=int(number))
