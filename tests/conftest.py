from __future__ import annotations

import copy
import json
import os
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from codesee_action.models import ToolResult

_RUNNER_VARS = (
    "GITHUB_EVENT_NAME",
    "GITHUB_EVENT_PATH",
    "GITHUB_REPOSITORY",
    "GITHUB_HEAD_REF",
    "GITHUB_BASE_REF",
    "GITHUB_RUN_ID",
    "GITHUB_WORKSPACE",
)


@pytest.fixture(autouse=True)
def clean_action_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Tests may run inside a real workflow; never read its inputs or event."""
    for key in list(os.environ):
        if key.startswith("INPUT_") or key in _RUNNER_VARS:
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(params=["asyncio"])
def anyio_backend(request):
    """Restrict anyio tests to asyncio only (trio is not installed)."""
    return request.param


@pytest.fixture
def fixtures_dir() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def event_pr_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "event_pr.json"


@pytest.fixture
def event_fork_pr_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "event_fork_pr.json"


@pytest.fixture
def event_push_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "event_push.json"


FORK_PAYLOAD = {
    "pull_request": {
        "head": {"repo": {"fork": True, "full_name": "alice/repo"}},
        "base": {"repo": {"full_name": "org/repo"}, "sha": "abc123"},
        "number": 42,
    }
}


@pytest.fixture
def fork_payload() -> dict:
    return copy.deepcopy(FORK_PAYLOAD)


class FakeCLI:
    """Stands in for CodeSeeCLI: records argument vectors and returns scripted exit codes."""

    def __init__(self, workdir: Path, exit_codes: dict | None = None, metadata: object = None) -> None:
        self.workdir = workdir
        self.exit_codes = exit_codes or {}
        self.metadata = metadata
        self.calls: list[list[str]] = []
        self.secrets: list[tuple] = []

    def _key(self, args: list[str]) -> str:
        if args[0] == "upload":
            return f"upload:{args[2]}"
        if args[0] == "insight":
            return f"insight:{args[2]}"
        return args[0]

    async def run(self, args, secrets=()):
        args = list(args)
        self.calls.append(args)
        self.secrets.append(tuple(secrets))
        if args[0] == "metadata" and self.metadata is not None:
            content = self.metadata if isinstance(self.metadata, str) else json.dumps(self.metadata)
            (self.workdir / "codesee.metadata.json").write_text(content, encoding="utf-8")
        return ToolResult(exit_code=self.exit_codes.get(self._key(args), 0))

    def path(self, name: str) -> Path:
        return self.workdir / name

    @property
    def subcommands(self) -> list[str]:
        return [self._key(call) for call in self.calls]


@pytest.fixture
def fake_cli_factory(tmp_path: Path):
    def _make(**kwargs) -> FakeCLI:
        return FakeCLI(tmp_path, **kwargs)

    return _make