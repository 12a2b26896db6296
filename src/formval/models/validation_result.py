"""
Validation result models for form input validation.

These models represent the output of a ``Form.validate()`` run.
"""

import math
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class StepResult(BaseModel):
    """Outcome of a single validation step."""

    model_config = ConfigDict(frozen=True)

    passed: bool = Field(..., description="Whether the step passed")
    reason: str | None = Field(
        default=None, description="Short machine-readable failure reason"
    )


class FieldResult(BaseModel):
    """Results of every validation step that ran for one field, in order."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    is_valid: bool = Field(default=True, description="Whether every step passed")
    steps: dict[str, StepResult] = Field(
        default_factory=dict, description="Step name to step outcome"
    )

    def add(self, step_name: str, result: StepResult) -> None:
        """Record a step outcome; a failure makes the field invalid."""
        self.steps[step_name] = result
        if not result.passed:
            self.is_valid = False

    @property
    def reasons(self) -> list[str]:
        """Failure reasons of the steps that did not pass."""
        return [
            result.reason or step_name
            for step_name, result in self.steps.items()
            if not result.passed
        ]


def _jsonable(value: Any) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, Mapping):
        return {str(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return value


class FormResult(BaseModel):
    """Result of form validation."""

    model_config = ConfigDict(frozen=True)

    is_form_valid: bool = Field(..., description="Whether the form data is valid")
    per_field_results: dict[str, FieldResult] = Field(
        default_factory=dict, description="Field name to field result"
    )
    field_value_hash: dict[str, Any] = Field(
        default_factory=dict, description="Field name to final (sanitized) value"
    )

    def __bool__(self) -> bool:
        """Falsy when invalid, so ``if not result:`` reads naturally."""
        return self.is_form_valid

    @property
    def invalid_fields(self) -> list[str]:
        """Names of the fields that failed validation."""
        return [
            name for name, result in self.per_field_results.items()
            if not result.is_valid
        ]

    def as_tuple(self) -> tuple[bool, dict[str, FieldResult], dict[str, Any]]:
        """Return ``(is_form_valid, per_field_results, field_value_hash)``."""
        return self.is_form_valid, self.per_field_results, self.field_value_hash

    def to_error_dict(self) -> dict[str, list[str]]:
        """Convert failures to a dict mapping field names to failure reasons."""
        return {
            name: result.reasons
            for name, result in self.per_field_results.items()
            if not result.is_valid
        }

    def to_response(self) -> dict[str, Any]:
        """Export the JSON payload the client collector expects."""
        return {
            "success": self.is_form_valid,
            "errors": {
                name: result.model_dump(by_alias=True)
                for name, result in self.per_field_results.items()
            },
            "values": _jsonable(self.field_value_hash),
        }
