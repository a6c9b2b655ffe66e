from __future__ import annotations

import asyncio
import shlex
import sys
from pathlib import Path
from typing import Iterable, Optional, Sequence, Tuple, Union

from .invocation import redact_args
from .logging import ActionLogger
from .models import ToolResult

NOT_FOUND_EXIT_CODE = 127


def default_command(version: str = "latest") -> Tuple[str, ...]:
    return ("npx", "--yes", f"codesee@{version or 'latest'}")


class CodeSeeCLI:
    """Launches the CodeSee CLI as a subprocess."""

    def __init__(
        self,
        logger: ActionLogger,
        command: Sequence[str] = default_command(),
        workdir: Union[Path, str] = ".",
    ) -> None:
        self.logger = logger
        self.command = tuple(command)
        self.workdir = Path(workdir)

    async def run(self, args: Sequence[str], secrets: Iterable[str] = ()) -> ToolResult:
        """
        Run `<command> <args>` in the working directory.

        Output is buffered until the process exits, then written to the job
        log in one piece with `secrets` masked; the command line is logged
        with `secrets` masked too.
        """
        secrets = tuple(s for s in secrets if s)
        cmd = [*self.command, *args]
        display = shlex.join(redact_args(cmd, secrets))
        self.logger.info("codesee_exec", command=display)

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=str(self.workdir),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except FileNotFoundError:
            self.logger.error("CodeSee CLI launcher not found", launcher=self.command[0])
            return ToolResult(exit_code=NOT_FOUND_EXIT_CODE, output="")

        stdout_b, _ = await proc.communicate()
        output = (stdout_b or b"").decode("utf-8", errors="replace")
        if output:
            sys.stdout.write(_mask(output, secrets))
            if not output.endswith("\n"):
                sys.stdout.write("\n")
            sys.stdout.flush()

        exit_code = int(proc.returncode or 0)
        self.logger.info("codesee_exit", command=display, exit_code=exit_code)
        return ToolResult(exit_code=exit_code, output=output)

    def path(self, name: str) -> Path:
        return self.workdir / name


def _mask(text: str, secrets: Iterable[str]) -> str:
    for secret in secrets:
        if secret:
            text = text.replace(secret, "***")
    return text


def build_cli(logger: ActionLogger, version: Optional[str], workdir: Union[Path, str]) -> CodeSeeCLI:
    return CodeSeeCLI(logger=logger, command=default_command(version or "latest"), workdir=workdir)
