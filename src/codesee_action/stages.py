from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from .cli import CodeSeeCLI
from .config import RunConfig
from .constants import INSIGHT_TYPES, MAP_FILE
from .context import EventContext
from .errors import ExternalToolFailure
from .invocation import (
    build_insight_args,
    build_insight_upload_args,
    build_map_args,
    build_upload_args,
)
from .logging import ActionLogger
from .models import GateDecision, Stage
from .oracle import needs_insights


@dataclass(frozen=True)
class RunContext:
    """Everything a stage may read. Built once per run."""

    config: RunConfig
    event: EventContext
    decision: GateDecision
    cli: CodeSeeCLI
    logger: ActionLogger

    @property
    def secrets(self) -> tuple:
        return (self.config.api_token.get_secret_value(),)


StageResult = Optional[Mapping[str, Any]]
StageFn = Callable[[RunContext, Mapping[str, Any]], Awaitable[StageResult]]


async def require_credential(ctx: RunContext, values: Mapping[str, Any]) -> StageResult:
    ctx.config.require_api_token()
    return None


async def generate(ctx: RunContext, values: Mapping[str, Any]) -> StageResult:
    result = await ctx.cli.run(build_map_args(ctx.config, ctx.decision, ctx.event), secrets=ctx.secrets)
    if not result.ok:
        raise ExternalToolFailure(f"Map generation failed with exit code {result.exit_code}", result.exit_code)
    return {"map_file": str(ctx.cli.path(MAP_FILE))}


async def upload(ctx: RunContext, values: Mapping[str, Any]) -> StageResult:
    if ctx.config.skip_upload:
        ctx.logger.info("Skipping map upload", reason="skip_upload")
        return {"map_uploaded": False}

    result = await ctx.cli.run(build_upload_args(ctx.config, ctx.event), secrets=ctx.secrets)
    if not result.ok:
        raise ExternalToolFailure(f"Map upload failed with exit code {result.exit_code}", result.exit_code)
    return {"map_uploaded": True}


async def insights(ctx: RunContext, values: Mapping[str, Any]) -> StageResult:
    if not await needs_insights(ctx.config, ctx.cli, ctx.logger):
        ctx.logger.info("Insights already exist; skipping collection")
        return {"insights_needed": False, "insights_collected": []}

    collected: List[str] = []
    failed: Dict[str, int] = {}
    for insight_type in INSIGHT_TYPES:
        ctx.logger.info("Collecting insight", insight_type=insight_type)
        result = await ctx.cli.run(build_insight_args(insight_type))
        if not result.ok:
            ctx.logger.error(
                "Insight collection failed", insight_type=insight_type, exit_code=result.exit_code
            )
            failed[insight_type] = result.exit_code
            continue

        collected.append(insight_type)
        if ctx.config.skip_upload:
            ctx.logger.info("Skipping insight upload", insight_type=insight_type)
            continue

        ctx.logger.info("Uploading insight", insight_type=insight_type)
        result = await ctx.cli.run(build_insight_upload_args(ctx.config, insight_type), secrets=ctx.secrets)
        if not result.ok:
            ctx.logger.error("Insight upload failed", insight_type=insight_type, exit_code=result.exit_code)
            failed[insight_type] = result.exit_code

    if failed:
        raise ExternalToolFailure(
            f"Insights failed for: {', '.join(failed)}",
            next(iter(failed.values())),
        )
    return {"insights_needed": True, "insights_collected": collected}


STAGES: Dict[Stage, StageFn] = {
    Stage.REQUIRE_CREDENTIAL: require_credential,
    Stage.GENERATE: generate,
    Stage.UPLOAD: upload,
    Stage.INSIGHTS: insights,
}

STAGE_LABELS: Dict[Stage, str] = {
    Stage.REQUIRE_CREDENTIAL: "Check API token",
    Stage.GENERATE: "Generate Map Data",
    Stage.UPLOAD: "Upload Map",
    Stage.INSIGHTS: "Insights",
}
