from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, FrozenSet, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .errors import UnknownStep


class Stage(str, Enum):
    GENERATE = "generate"
    REQUIRE_CREDENTIAL = "requireCredential"
    UPLOAD = "upload"
    INSIGHTS = "insights"


class StepName(str, Enum):
    """Closed set of steps; each member carries its ordered stages."""

    MAP = ("map", (Stage.GENERATE,))
    MAP_UPLOAD = ("mapUpload", (Stage.REQUIRE_CREDENTIAL, Stage.UPLOAD))
    INSIGHTS = ("insights", (Stage.REQUIRE_CREDENTIAL, Stage.INSIGHTS))
    LEGACY = (
        "legacy",
        (Stage.REQUIRE_CREDENTIAL, Stage.GENERATE, Stage.UPLOAD, Stage.INSIGHTS),
    )

    stages: Tuple[Stage, ...]

    def __new__(cls, value: str, stages: Tuple[Stage, ...]) -> "StepName":
        obj = str.__new__(cls, value)
        obj._value_ = value
        obj.stages = stages
        return obj

    @classmethod
    def names(cls) -> Tuple[str, ...]:
        return tuple(member.value for member in cls)

    @classmethod
    def parse(cls, value: str) -> "StepName":
        for member in cls:
            if member.value == value:
                return member
        raise UnknownStep(value, cls.names())


class PipelineState(str, Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class GateDecision:
    """Capabilities suppressed for this run."""

    disabled: FrozenSet[str] = frozenset()
    reason: str = "all_capabilities_allowed"

    @property
    def allows_all(self) -> bool:
        return not self.disabled

    def excluded_languages(self) -> Tuple[str, ...]:
        return tuple(sorted(self.disabled))


@dataclass(frozen=True)
class PullRequestRef:
    base_ref: str
    base_sha: str
    number: int


@dataclass(frozen=True)
class ToolResult:
    exit_code: int
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


@dataclass(frozen=True)
class Remote:
    name: str
    fetch: str = ""
    push: str = ""


class InsightRecord(BaseModel):
    """Metadata the CodeSee service holds for a repository."""

    model_config = ConfigDict(extra="ignore")

    insights: List[Any] = Field(default_factory=list)

    @property
    def needs_insights(self) -> bool:
        return len(self.insights) == 0


@dataclass
class PipelineResult:
    step: StepName
    state: PipelineState
    executed: List[Stage] = field(default_factory=list)
    values: dict = field(default_factory=dict)
    failed_stage: Optional[Stage] = None
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.state == PipelineState.COMPLETED
