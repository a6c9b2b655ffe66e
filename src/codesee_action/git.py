from __future__ import annotations

import asyncio
import re
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .errors import ExternalToolFailure, RemoteResolutionFailure
from .models import Remote

_ORIGIN_URL_RE = re.compile(
    r"^(?:https?://(?:[^@/]+@)?github\.com/|ssh://git@github\.com/|git@github\.com:)"
    r"(?P<owner>[^/\s]+)/(?P<repo>[^/\s]+?)(?:\.git)?/?$"
)


def parse_remotes(output: str) -> List[Remote]:
    """Parse `git remote -v` output into one Remote per name."""
    refs: Dict[str, Dict[str, str]] = {}
    for line in output.splitlines():
        parts = line.split()
        if len(parts) < 2:
            continue
        name, url = parts[0], parts[1]
        kind = parts[2].strip("()") if len(parts) > 2 else "fetch"
        entry = refs.setdefault(name, {})
        if kind in ("fetch", "push"):
            entry[kind] = url
    return [
        Remote(name=name, fetch=urls.get("fetch", ""), push=urls.get("push", ""))
        for name, urls in refs.items()
    ]


def parse_origin(url: str) -> Optional[str]:
    """Return `owner/repo` for a GitHub remote URL, or None."""
    match = _ORIGIN_URL_RE.match((url or "").strip())
    if not match:
        return None
    return f"{match.group('owner')}/{match.group('repo')}"


def resolve_origin(remotes: Sequence[Remote]) -> str:
    origins = [remote for remote in remotes if remote.name == "origin"]
    if len(origins) != 1:
        raise RemoteResolutionFailure(
            f"Expected exactly one 'origin' remote, found {len(origins)}"
        )
    remote = origins[0]
    origin = parse_origin(remote.fetch or remote.push)
    if not origin:
        raise RemoteResolutionFailure(
            f"Could not parse owner/repo from origin remote '{remote.fetch or remote.push}'"
        )
    return origin


class GitClient:
    def __init__(self, workdir: Union[Path, str] = "."):
        self.workdir = Path(workdir)

    async def _git(self, *args: str) -> Tuple[int, str]:
        try:
            proc = await asyncio.create_subprocess_exec(
                "git",
                *args,
                cwd=str(self.workdir),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except FileNotFoundError:
            return 127, "git not found"
        stdout_b, _ = await proc.communicate()
        return int(proc.returncode or 0), (stdout_b or b"").decode("utf-8", errors="replace")

    async def get_remotes(self) -> List[Remote]:
        code, output = await self._git("remote", "-v")
        if code != 0:
            raise RemoteResolutionFailure(f"git remote -v failed: {output.strip()}")
        return parse_remotes(output)

    async def checkout(self, ref: str) -> None:
        """Fetch `ref` from origin and check it out as a local branch."""
        code, output = await self._git("fetch", "--depth=1", "origin", ref)
        if code != 0:
            raise ExternalToolFailure(f"git fetch of '{ref}' failed: {output.strip()}", code)
        code, output = await self._git("checkout", "-B", ref, "FETCH_HEAD")
        if code != 0:
            raise ExternalToolFailure(f"git checkout of '{ref}' failed: {output.strip()}", code)
