from __future__ import annotations

from typing import Iterable, Optional

from .constants import ExitCode


class CodeSeeActionError(Exception):
    """Base exception for all action errors."""

    exit_code: ExitCode = ExitCode.ERROR


class MissingRequiredConfig(CodeSeeActionError):
    """A step needs a configuration value (usually the API token) that is absent."""


class UnknownStep(CodeSeeActionError):
    """Configured step name is not one of the known steps."""

    def __init__(self, name: str, valid: Iterable[str]):
        self.name = name
        self.valid = tuple(valid)
        super().__init__(f"Unknown step '{name}'. Valid steps: {', '.join(self.valid)}")


class MalformedEventPayload(CodeSeeActionError):
    """Pull request event claimed but the payload lacks the expected fields."""


class RemoteResolutionFailure(CodeSeeActionError):
    """Could not resolve exactly one origin remote."""


class ExternalToolFailure(CodeSeeActionError):
    """An external process (CodeSee CLI, git) exited non-zero."""

    exit_code = ExitCode.FAILED

    def __init__(self, message: str, tool_exit_code: Optional[int] = None):
        super().__init__(message)
        self.tool_exit_code = tool_exit_code
