"""
Field pipeline runner.

Runs one field through its stages, strictly in order::

    INIT -> BEFORE_TRANSFORMS -> VALIDATIONS -> AFTER_TRANSFORMS -> DONE

Every step is awaited before the next one starts. Exceptions raised by a
step are fatal and propagate to the caller of ``Form.validate()``.
Validation failures are not exceptions: they are recorded in the field's
``FieldResult`` and, with ``stop_on_invalid``, end the validation stage
early. After-transforms only run on fields that passed.
"""

import logging
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING

from formval.context import FieldContext
from formval.models.field_definitions import FieldState, StepSpec
from formval.models.validation_result import FieldResult
from formval.tracing import span

if TYPE_CHECKING:
    from formval.orchestrator import Form

logger = logging.getLogger(__name__)


class PipelineStage(str, Enum):
    INIT = "init"
    BEFORE_TRANSFORMS = "before-transforms"
    VALIDATIONS = "validations"
    AFTER_TRANSFORMS = "after-transforms"
    DONE = "done"


class FieldPipeline:
    """Runs the transforms and validations of a single field."""

    def __init__(self, state: FieldState, form: "Form"):
        self.state = state
        self.form = form
        self.stage = PipelineStage.INIT

    def _advance(self, stage: PipelineStage) -> None:
        logger.debug(f"Field '{self.state.field_name}': {self.stage.value} -> {stage.value}")
        self.stage = stage

    def context(self) -> FieldContext:
        """Snapshot of the field and its siblings for the next step."""
        state = self.state
        return FieldContext(
            field_name=state.field_name,
            data_type=state.data_type,
            required=state.required,
            value=state.value,
            raw_value=state.raw_value,
            settings=self.form.settings,
            siblings=self.form.sibling_view(exclude=state.field_name),
            extra_data=MappingProxyType(state.extra_data),
        )

    async def _run_transforms(self, specs: tuple[StepSpec, ...]) -> None:
        for spec in specs:
            if not spec.enabled:
                continue
            with span("transform", field=self.state.field_name, step=spec.name):
                self.state.value = await spec.step(self.context(), spec.options)
            logger.debug(f"Field '{self.state.field_name}': transform '{spec.name}' applied")

    async def _run_validations(self, specs: tuple[StepSpec, ...]) -> FieldResult:
        result = FieldResult()
        stop_on_invalid = self.form.settings.stop_on_invalid

        for spec in specs:
            if not spec.enabled:
                continue
            with span("validation", field=self.state.field_name, step=spec.name) as current:
                outcome = await spec.step(self.context(), spec.options)
                if current is not None:
                    current.span_data.data.update(passed=outcome.passed, reason=outcome.reason)

            result.add(spec.name, outcome)
            logger.debug(
                f"Field '{self.state.field_name}': validation '{spec.name}' "
                f"{'passed' if outcome.passed else f'failed ({outcome.reason})'}"
            )
            if not outcome.passed and stop_on_invalid:
                break

        return result

    async def run(self) -> FieldResult:
        """Run every stage and store the outcome on the field state."""
        definition = self.state.definition

        with span("field", field=self.state.field_name):
            self._advance(PipelineStage.BEFORE_TRANSFORMS)
            await self._run_transforms(definition.before_transforms)

            self._advance(PipelineStage.VALIDATIONS)
            result = await self._run_validations(definition.validations)

            self._advance(PipelineStage.AFTER_TRANSFORMS)
            if result.is_valid:
                await self._run_transforms(definition.after_transforms)

            self._advance(PipelineStage.DONE)

        self.state.is_valid = result.is_valid
        self.state.result = result
        return result
