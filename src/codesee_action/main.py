from __future__ import annotations

import asyncio
import os
import sys
import uuid
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from pydantic_settings import SettingsError

from .cli import build_cli
from .config import RunConfig, resolve_run_config
from .constants import ExitCode
from .context import EventContext
from .errors import CodeSeeActionError, MalformedEventPayload
from .events import is_forked_pull_request_event
from .gate import decide_disabled_capabilities
from .git import GitClient
from .logging import ActionLogger
from .models import GateDecision
from .pipeline import Pipeline
from .stages import RunContext

FAILURE_PREFIX = "CodeSee Map failed"


def main() -> int:
    """Main entry point."""
    return asyncio.run(async_main())


def _fail(logger: ActionLogger, exc: BaseException) -> int:
    logger.set_failed(f"{FAILURE_PREFIX}: {exc}")
    if isinstance(exc, CodeSeeActionError):
        return int(exc.exit_code)
    return int(ExitCode.ERROR)


def _log_decision(logger: ActionLogger, decision: GateDecision) -> None:
    if decision.allows_all:
        logger.info("All capabilities allowed", reason=decision.reason)
    else:
        logger.warning(
            "Disabling analyzers that execute repository code on a forked pull request",
            disabled=",".join(decision.excluded_languages()),
            reason=decision.reason,
        )


async def _checkout_head_ref(git: GitClient, config: RunConfig, event: EventContext, logger: ActionLogger) -> None:
    """Same-repository pull requests run on their head branch; forks stay on the merge checkout."""
    if not config.head_ref or not event.is_pull_request:
        return
    try:
        forked = is_forked_pull_request_event(event.event_name, event.payload)
    except MalformedEventPayload:
        forked = True
    if forked:
        logger.info("Forked pull request; keeping current checkout", head_ref=config.head_ref)
        return
    await git.checkout(config.head_ref)
    logger.info("Checked out head ref", head_ref=config.head_ref)


async def async_main() -> int:
    """Async main entry point."""
    run_id = os.environ.get("GITHUB_RUN_ID") or str(uuid.uuid4())
    logger = ActionLogger(run_id)
    workdir = Path(os.environ.get("GITHUB_WORKSPACE", "."))
    git = GitClient(workdir)

    config: Optional[RunConfig] = None
    try:
        with logger.group("Setup"):
            try:
                config = await resolve_run_config(git, logger)
            except (ValidationError, SettingsError) as exc:
                logger.set_failed(f"{FAILURE_PREFIX}: Configuration error: {exc}")
                return int(ExitCode.ERROR)

            logger.add_mask(config.api_token.get_secret_value())
            event = EventContext.from_environment(config)
            logger.info(
                "CodeSee action starting",
                origin=config.origin,
                event_name=event.event_name,
                step=config.step,
                head_ref=config.head_ref,
                has_credential=config.has_credential(),
            )
            logger.debug(f"CONFIG: {config!r}")

            pipeline = Pipeline.for_step(config.step)
            decision = decide_disabled_capabilities(config, event.event_name, event.payload)
            _log_decision(logger, decision)
            await _checkout_head_ref(git, config, event, logger)
    except Exception as exc:
        return _fail(logger, exc)

    ctx = RunContext(
        config=config,
        event=event,
        decision=decision,
        cli=build_cli(logger, config.codesee_version, workdir),
        logger=logger,
    )
    result = await pipeline.run(ctx)
    if not result.succeeded:
        stage = result.failed_stage.value if result.failed_stage else "unknown"
        logger.error("Pipeline failed", step=result.step.value, stage=stage)
        return _fail(logger, result.error or RuntimeError(f"stage {stage} failed"))

    logger.info(
        "Pipeline completed",
        step=result.step.value,
        stages=[stage.value for stage in result.executed],
    )
    return int(ExitCode.SUCCESS)


if __name__ == "__main__":
    sys.exit(main())
