"""
Argument vectors for the CodeSee CLI.

Every function here is pure: the same config, gate decision and event always
produce the same vector. The API token appears only in vectors handed to the
subprocess; use `redact_args` before logging one.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, List, Sequence

from .constants import GITHUB_URL, MAP_FILE, METADATA_FILE, insight_file
from .errors import MissingRequiredConfig
from .events import pull_request_ref
from .models import GateDecision

if TYPE_CHECKING:
    from .config import RunConfig
    from .context import EventContext

REDACTED = "***"


def repo_url(config: "RunConfig") -> str:
    if not config.origin:
        raise MissingRequiredConfig("Repository origin (owner/repo) could not be resolved")
    return f"{GITHUB_URL}/{config.origin}"


def _ref_args(config: "RunConfig", event: "EventContext") -> List[str]:
    args: List[str] = []
    if config.head_ref:
        args += ["-r", config.head_ref]
    if event.is_pull_request:
        pr = pull_request_ref(event.payload, base_ref=config.base_ref)
        args += ["-b", pr.base_ref, "-s", pr.base_sha, "-p", str(pr.number)]
    return args


def _auth_args(config: "RunConfig") -> List[str]:
    return ["--repo", repo_url(config), "-a", config.require_api_token()]


def build_map_args(config: "RunConfig", decision: GateDecision, event: "EventContext") -> List[str]:
    args = ["map", "-o", MAP_FILE]
    if config.webpack_config_path:
        args += ["-w", config.webpack_config_path]
    if config.support_typescript:
        args.append("--typescript")
    args += _ref_args(config, event)
    excluded = decision.excluded_languages()
    if excluded:
        args += ["-x", ",".join(excluded)]
    return args


def build_upload_args(config: "RunConfig", event: "EventContext") -> List[str]:
    return ["upload", "--type", "map", *_auth_args(config), *_ref_args(config, event), MAP_FILE]


def build_metadata_args(config: "RunConfig") -> List[str]:
    return ["metadata", *_auth_args(config), "-o", METADATA_FILE]


def build_insight_args(insight_type: str) -> List[str]:
    return ["insight", "--insightType", insight_type, "-o", insight_file(insight_type)]


def build_insight_upload_args(config: "RunConfig", insight_type: str) -> List[str]:
    args = ["upload", "--type", "insight", *_auth_args(config), insight_file(insight_type)]
    if config.insights_service_url:
        args += ["--url", config.insights_service_url]
    return args


def redact_args(args: Sequence[str], secrets: Iterable[str]) -> List[str]:
    """Copy of `args` with every secret value replaced, including inside `--flag=value` forms."""
    hidden = [secret for secret in secrets if secret]
    redacted: List[str] = []
    for arg in args:
        for secret in hidden:
            arg = arg.replace(secret, REDACTED)
        redacted.append(arg)
    return redacted
