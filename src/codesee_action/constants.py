from __future__ import annotations

from enum import Enum


class ExitCode(int, Enum):
    """Process exit codes."""

    SUCCESS = 0
    FAILED = 1
    ERROR = 2


NULL_SENTINEL = "__NULL__"

MAP_FILE = "codesee.map.json"
METADATA_FILE = "codesee.metadata.json"

INSIGHT_TYPES = (
    "commitCountLast30Days",
    "lastCommitDate",
    "createDate",
    "linesOfCode",
)

# Analyzers that execute repository-supplied code while mapping.
UNSAFE_LANGUAGES = frozenset({"python"})

PULL_REQUEST_EVENTS = frozenset({"pull_request", "pull_request_target"})

GITHUB_URL = "https://github.com"


def insight_file(insight_type: str) -> str:
    return f"codesee.{insight_type}.json"
