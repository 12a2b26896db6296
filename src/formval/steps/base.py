"""
Step base classes and registries.

A step is a named transform or validation. Each step class declares the
data types it accepts and a pydantic ``Options`` model; the raw options a
caller writes in a field config are resolved into that model once, when the
field is defined.

Transforms return the new value::

    class Shout(Transform):
        name = "shout"
        allowed_data_types = frozenset({DataType.STRING})

        def transform(self, ctx, options):
            return ctx.value.upper() + "!"

Validations return ``(passed, reason)``::

    class NoSpaces(Validation):
        name = "no-spaces"

        def check(self, ctx, options):
            return " " not in ctx.value, "has-spaces"

Both methods may also be coroutines.
"""

import inspect
import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from formval.context import FieldContext
from formval.errors import InvalidOptionsError, WrongDataTypeError
from formval.models.validation_result import StepResult
from formval.types import DataType

logger = logging.getLogger(__name__)


class StepOptions(BaseModel):
    """Base options model; every step understands ``run``."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
        arbitrary_types_allowed=True,
    )

    run: bool = True


class FreeOptions(StepOptions):
    """Options model for function-backed steps; any key is accepted."""

    model_config = ConfigDict(extra="allow")


async def maybe_await(value: Any) -> Any:
    """Await ``value`` if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


def _is_off(raw: Any) -> bool:
    if raw is None or raw is False:
        return True
    return isinstance(raw, (int, float, str)) and not isinstance(raw, bool) and not raw


def as_step_result(outcome: Any) -> StepResult:
    """Normalise what a check returned into a ``StepResult``.

    Accepts a ``StepResult``, a bool, a ``(passed, reason)`` tuple or a
    ``{"passed": ..., "reason": ...}`` mapping.
    """
    if isinstance(outcome, StepResult):
        return outcome
    if isinstance(outcome, tuple):
        passed, reason = (outcome + (None,))[:2]
        return StepResult(passed=bool(passed), reason=reason if not passed else None)
    if isinstance(outcome, Mapping):
        passed = outcome.get("passed", outcome.get("isValid", False))
        return StepResult(passed=bool(passed), reason=outcome.get("reason"))
    return StepResult(passed=bool(outcome))


class Step:
    """Base class for transforms and validations."""

    name: ClassVar[str] = ""
    kind: ClassVar[str] = "step"
    allowed_data_types: ClassVar[frozenset[DataType] | None] = None  # None = any
    primary_option: ClassVar[str | None] = None
    Options: ClassVar[type[StepOptions]] = StepOptions

    def resolve_options(self, raw: Any) -> StepOptions | None:
        """Resolve shorthand options into the step's options model.

        Returns ``None`` when the step is switched off.

        Raises:
            InvalidOptionsError: If the options do not fit the model.
        """
        if _is_off(raw):
            return None
        if isinstance(raw, Mapping):
            if raw.get("run", True) is False:
                return None
            data: dict[str, Any] = dict(raw)
        elif raw is True or self.primary_option is None:
            # Any other truthy value just switches the step on.
            data = {}
        else:
            data = {self.primary_option: raw}

        try:
            options = self.Options.model_validate(data)
        except ValidationError as e:
            raise InvalidOptionsError(
                f"Invalid options for the '{self.name}' {self.kind}: {e}",
                step=self.name,
                options=raw,
            ) from e

        self.check_options(options)
        return options

    def check_options(self, options: StepOptions) -> None:
        """Hook for raising fatal errors about option values."""

    def accepts(self, data_type: DataType) -> bool:
        return self.allowed_data_types is None or data_type in self.allowed_data_types

    def ensure_data_type(self, ctx: FieldContext) -> None:
        if not self.accepts(ctx.data_type):
            raise WrongDataTypeError(
                f"The '{self.name}' {self.kind} cannot run on "
                f"'{ctx.data_type.value}' field '{ctx.field_name}'.",
                step=self.name,
                data_type=ctx.data_type.value,
                allowed=sorted(t.value for t in self.allowed_data_types or ()),
            )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"


class Transform(Step):
    """A step that returns a new value for the field."""

    kind = "transform"

    async def __call__(self, ctx: FieldContext, options: StepOptions) -> Any:
        self.ensure_data_type(ctx)
        return await maybe_await(self.transform(ctx, options))

    def transform(self, ctx: FieldContext, options: StepOptions) -> Any:
        raise NotImplementedError("Subclasses must implement transform()")


class Validation(Step):
    """A step that decides whether the field value is valid."""

    kind = "validation"
    # Empty optional fields pass without being inspected.
    skip_when_empty: ClassVar[bool] = True

    async def __call__(self, ctx: FieldContext, options: StepOptions) -> StepResult:
        self.ensure_data_type(ctx)
        if self.skip_when_empty and not ctx.required and ctx.is_empty:
            return StepResult(passed=True)
        return as_step_result(await maybe_await(self.check(ctx, options)))

    def check(self, ctx: FieldContext, options: StepOptions) -> Any:
        raise NotImplementedError("Subclasses must implement check()")


class FunctionTransform(Transform):
    """Wraps a plain ``fn(ctx, options)`` as a named transform."""

    Options = FreeOptions

    def __init__(
        self,
        name: str,
        fn: Callable[[FieldContext, StepOptions], Any],
        allowed_data_types: Iterable[DataType] | None = None,
        primary_option: str | None = None,
    ):
        self.name = name
        self.fn = fn
        self.allowed_data_types = frozenset(allowed_data_types) if allowed_data_types else None
        self.primary_option = primary_option

    def transform(self, ctx: FieldContext, options: StepOptions) -> Any:
        return self.fn(ctx, options)


class FunctionValidation(Validation):
    """Wraps a plain ``fn(ctx, options)`` as a named validation."""

    Options = FreeOptions

    def __init__(
        self,
        name: str,
        fn: Callable[[FieldContext, StepOptions], Any],
        allowed_data_types: Iterable[DataType] | None = None,
        primary_option: str | None = None,
    ):
        self.name = name
        self.fn = fn
        self.allowed_data_types = frozenset(allowed_data_types) if allowed_data_types else None
        self.primary_option = primary_option

    def check(self, ctx: FieldContext, options: StepOptions) -> Any:
        return self.fn(ctx, options)


class Registry(Mapping[str, Step]):
    """Read-only name to step mapping.

    ``extend()`` returns a new registry, so the built-in registries can be
    shared by every form without being modified.
    """

    def __init__(self, steps: Iterable[Step] = (), kind: str = "step"):
        self.kind = kind
        self._steps: dict[str, Step] = {}
        for step in steps:
            if not step.name:
                raise InvalidOptionsError("Steps must have a name.", step=step)
            self._steps[step.name] = step

    def __getitem__(self, name: str) -> Step:
        return self._steps[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._steps)

    def __len__(self) -> int:
        return len(self._steps)

    def extend(self, *steps: Step) -> "Registry":
        """Return a copy of this registry with ``steps`` added or replaced."""
        logger.debug(f"Extending {self.kind} registry with {[s.name for s in steps]}")
        return Registry([*self._steps.values(), *steps], kind=self.kind)

    def __repr__(self) -> str:
        return f"Registry({self.kind}, {sorted(self._steps)})"
