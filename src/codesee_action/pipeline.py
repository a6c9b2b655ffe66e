from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Union

from .models import PipelineResult, PipelineState, Stage, StepName
from .stages import STAGE_LABELS, STAGES, RunContext, StageFn


class Pipeline:
    """
    Runs the stages of one step strictly in order.

    The first stage that raises moves the pipeline to FAILED and the remaining
    stages never run. Nothing is rolled back: files the CLI already wrote stay.
    Values returned by stages accumulate in a dict owned by this object; later
    stages see a read-only copy.
    """

    def __init__(self, step: StepName, registry: Optional[Mapping[Stage, StageFn]] = None):
        self.step = step
        self.registry: Dict[Stage, StageFn] = dict(STAGES if registry is None else registry)
        missing = [stage.value for stage in step.stages if stage not in self.registry]
        if missing:
            raise ValueError(f"No implementation registered for stages: {', '.join(missing)}")
        self.state = PipelineState.NOT_STARTED
        self._values: Dict[str, Any] = {}
        self._executed: List[Stage] = []

    @classmethod
    def for_step(
        cls,
        name: Union[str, StepName],
        registry: Optional[Mapping[Stage, StageFn]] = None,
    ) -> "Pipeline":
        step = name if isinstance(name, StepName) else StepName.parse(name)
        return cls(step, registry)

    async def run(self, ctx: RunContext) -> PipelineResult:
        if self.state != PipelineState.NOT_STARTED:
            raise RuntimeError(f"Pipeline for step '{self.step.value}' has already run")

        self.state = PipelineState.RUNNING
        for stage in self.step.stages:
            self._executed.append(stage)
            try:
                with ctx.logger.group(STAGE_LABELS.get(stage, stage.value)), ctx.logger.stage(stage.value):
                    produced = await self.registry[stage](ctx, MappingProxyType(dict(self._values)))
            except Exception as exc:
                self.state = PipelineState.FAILED
                return self._result(failed_stage=stage, error=exc)
            if produced:
                self._values.update(produced)

        self.state = PipelineState.COMPLETED
        return self._result()

    def _result(self, failed_stage: Optional[Stage] = None, error: Optional[BaseException] = None) -> PipelineResult:
        return PipelineResult(
            step=self.step,
            state=self.state,
            executed=list(self._executed),
            values=dict(self._values),
            failed_stage=failed_stage,
            error=error,
        )
