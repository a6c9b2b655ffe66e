from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

from .events import is_pull_request_event

if TYPE_CHECKING:
    from .config import RunConfig


def load_event_payload(event_path: Optional[str]) -> Dict[str, Any]:
    """Read the event JSON; anything missing or malformed degrades to an empty record."""
    if not event_path:
        return {}
    try:
        payload = json.loads(Path(event_path).read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return {}
    return payload if isinstance(payload, dict) else {}


@dataclass(frozen=True)
class EventContext:
    """Immutable event name and payload of the triggering workflow event."""

    event_name: str
    payload: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.payload, MappingProxyType):
            object.__setattr__(self, "payload", MappingProxyType(dict(self.payload or {})))

    @property
    def is_pull_request(self) -> bool:
        return is_pull_request_event(self.event_name)

    @classmethod
    def from_environment(cls, config: Optional["RunConfig"] = None) -> "EventContext":
        """Load the event from the runner environment, honouring the with_event_* test overrides."""
        event_name = (config.with_event_name if config else None) or os.environ.get("GITHUB_EVENT_NAME", "")
        event_path = (config.with_event_data if config else None) or os.environ.get("GITHUB_EVENT_PATH")
        return cls(event_name=event_name.strip(), payload=load_event_payload(event_path))
