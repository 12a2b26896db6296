"""
Formval: declarative form validation with an async field pipeline.

Define each field once (type, transforms, validations) and validate a raw
submission against those definitions.

Simple Usage:
    from formval import validate_form

    result = await validate_form(
        {"age": "15", "email": " jo@example.com "},
        [
            {"fieldName": "email", "dataType": "email", "required": True},
            {"fieldName": "age", "dataType": "int",
             "validations": {"numeric": {"min": 18, "max": 120}}},
        ],
    )

    is_form_valid, per_field_results, values = result.as_tuple()

Advanced Usage:
    from formval import Form

    form = Form(request_data, stop_on_invalid=False)
    form.define_field(fieldName="password", dataType="password",
                      validations={"password": {"minScore": 5}})
    form.define_field(fieldName="confirm", dataType="password",
                      validations={"match-field": "password"})

    # Whole-form check, run after every field
    form.additional_validation(
        lambda form, values: {"confirm": values["confirm"] != "letmein"}
    )

    result = await form.validate()
    response = result.to_response()  # {"success", "errors", "values"}

Formatting:
    from formval import format

    format("+44.7912345678", "telephone", {"format": "uk-mobile"})

Tracing:
    from formval.tracing import setup_tracing

    # Enable console tracing
    setup_tracing(console=True, verbose=True)

    # Or write to file
    setup_tracing(file_path="traces.jsonl")
"""

from formval.orchestrator import (
    Form,
    validate_form,
)
from formval.models.field_definitions import (
    FieldConfig,
    FieldDefinition,
    FieldState,
)
from formval.models.validation_result import (
    FieldResult,
    FormResult,
    StepResult,
)
from formval.types import (
    DataType,
    is_populated,
)
from formval.steps import (
    FunctionTransform,
    FunctionValidation,
    Registry,
    TRANSFORMS,
    VALIDATIONS,
)
from formval.formatters import format
from formval.strength import (
    PasswordChecker,
    PasswordRequirements,
    RequirementChecker,
)
from formval.errors import FormvalError
from formval.tracing import (
    setup_tracing,
    disable_tracing,
    enable_tracing,
    flush_tracing,
)

__all__ = [
    # Main interface
    "Form",
    "validate_form",
    # Field models
    "FieldConfig",
    "FieldDefinition",
    "FieldState",
    # Results
    "FieldResult",
    "FormResult",
    "StepResult",
    # Types
    "DataType",
    "is_populated",
    # Steps
    "FunctionTransform",
    "FunctionValidation",
    "Registry",
    "TRANSFORMS",
    "VALIDATIONS",
    # Formatting
    "format",
    # Passwords
    "PasswordChecker",
    "PasswordRequirements",
    "RequirementChecker",
    # Errors
    "FormvalError",
    # Tracing
    "setup_tracing",
    "disable_tracing",
    "enable_tracing",
    "flush_tracing",
]

__version__ = "0.1.0"
