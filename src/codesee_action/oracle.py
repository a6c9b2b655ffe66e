from __future__ import annotations

import json
from typing import TYPE_CHECKING

from pydantic import ValidationError

from .constants import METADATA_FILE
from .invocation import build_metadata_args
from .models import InsightRecord

if TYPE_CHECKING:
    from .cli import CodeSeeCLI
    from .config import RunConfig
    from .logging import ActionLogger


async def needs_insights(config: "RunConfig", cli: "CodeSeeCLI", logger: "ActionLogger") -> bool:
    """
    Whether insights have to be collected for this repository.

    Fails toward doing the work: a failed metadata fetch or an unreadable
    metadata file both answer True.
    """
    result = await cli.run(build_metadata_args(config), secrets=(config.api_token.get_secret_value(),))
    if not result.ok:
        logger.warning("Metadata fetch failed; assuming insights are needed", exit_code=result.exit_code)
        return True

    try:
        raw = cli.path(METADATA_FILE).read_text(encoding="utf-8")
        record = InsightRecord.model_validate(json.loads(raw))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as exc:
        logger.warning("Metadata unreadable; assuming insights are needed", error=str(exc))
        return True

    logger.info("Fetched insight metadata", insight_count=len(record.insights))
    return record.needs_insights
