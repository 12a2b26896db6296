"""
Field definition models.

``FieldConfig`` is what callers hand to ``Form.define_field()``.
The builder turns it into an immutable ``FieldDefinition`` and a mutable
``FieldState`` that the pipeline works on during a validation run.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from formval.models.validation_result import FieldResult
from formval.types import DataType

if TYPE_CHECKING:
    from formval.steps.base import Step, StepOptions


class TransformConfig(BaseModel):
    """Before/after transform mappings of a field."""

    model_config = ConfigDict(extra="forbid")

    before: dict[str, Any] = Field(
        default_factory=dict, description="Transforms run before validation, in order"
    )
    after: dict[str, Any] = Field(
        default_factory=dict, description="Transforms run after a successful validation"
    )


class FieldConfig(BaseModel):
    """
    Configuration for a single field.

    Each transform/validation entry accepts ``True`` (defaults), a scalar
    shorthand for the step's primary option, or an options mapping. Falsy
    entries and ``{"run": False}`` keep the step but never run it.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    field_name: str = Field(..., min_length=1, description="Field name/identifier")
    data_type: Any = Field(..., description="Data type alias, e.g. 'str', 'tel', 'number'")
    default_value: Any = Field(
        default=None, description="Used when the raw input has no entry for this field"
    )
    required: bool = Field(default=False, description="Shorthand for a 'required' validation")
    trim: bool = Field(default=False, description="Shorthand for a 'str-trim' before-transform")
    modify: Any = Field(default=None, description="Shorthand for a 'custom' before-transform")
    typecasting: bool = Field(default=True, description="Set False to keep the raw value as-is")
    transforms: TransformConfig = Field(default_factory=TransformConfig)
    validations: dict[str, Any] = Field(default_factory=dict)
    extra_data: dict[str, Any] = Field(
        default_factory=dict, description="Caller metadata carried on the field state"
    )


@dataclass(frozen=True)
class StepSpec:
    """A configured step with its options resolved."""

    name: str
    step: "Step"
    options: "StepOptions"
    enabled: bool = True


@dataclass(frozen=True)
class FieldDefinition:
    """Immutable, fully normalised configuration of one field."""

    field_name: str
    data_type: DataType
    required: bool
    typecasting: bool
    default_value: Any
    before_transforms: tuple[StepSpec, ...] = ()
    validations: tuple[StepSpec, ...] = ()
    after_transforms: tuple[StepSpec, ...] = ()


@dataclass
class FieldState:
    """Working state of a field during validation."""

    definition: FieldDefinition
    value: Any
    raw_value: Any
    is_valid: bool | None = None  # None until validated
    extra_data: dict[str, Any] = field(default_factory=dict)
    result: FieldResult | None = None

    @property
    def field_name(self) -> str:
        return self.definition.field_name

    @property
    def data_type(self) -> DataType:
        return self.definition.data_type

    @property
    def required(self) -> bool:
        return self.definition.required
