"""
Data models for formval.

This module contains:
- Field configuration, definition and state
- Validation results
"""

from formval.models.field_definitions import (
    FieldConfig,
    FieldDefinition,
    FieldState,
    StepSpec,
    TransformConfig,
)
from formval.models.validation_result import (
    FieldResult,
    FormResult,
    StepResult,
)

__all__ = [
    # Field models
    "FieldConfig",
    "FieldDefinition",
    "FieldState",
    "StepSpec",
    "TransformConfig",
    # Results
    "FieldResult",
    "FormResult",
    "StepResult",
]
