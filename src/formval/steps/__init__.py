"""
Transform and validation steps.

This module contains:
- The step base classes and ``Registry``
- The built-in transforms (``TRANSFORMS``)
- The built-in validations (``VALIDATIONS``)
"""

from formval.steps.base import (
    FunctionTransform,
    FunctionValidation,
    Registry,
    Step,
    StepOptions,
    Transform,
    Validation,
    as_step_result,
)
from formval.steps.transforms import TRANSFORMS
from formval.steps.validations import VALIDATIONS

__all__ = [
    "FunctionTransform",
    "FunctionValidation",
    "Registry",
    "Step",
    "StepOptions",
    "Transform",
    "Validation",
    "as_step_result",
    "TRANSFORMS",
    "VALIDATIONS",
]
