"""
Exception hierarchy for formval.

Every fatal problem (bad configuration, unknown step names, malformed step
options, stale clients) raises a ``FormvalError`` subclass. Ordinary
validation failures are never exceptions; they show up as
``StepResult(passed=False, reason=...)`` entries instead.
"""

from typing import Any


class FormvalError(Exception):
    """Base for all formval errors."""

    code: str = "formval-error"
    message: str = "A form validation error occurred."

    def __init__(self, message: str | None = None, **details: Any):
        self.details = details
        super().__init__(message or self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialise the error for JSON responses."""
        return {
            "code": self.code,
            "message": str(self),
            "details": {key: repr(value) for key, value in self.details.items()},
        }


class FieldConfigError(FormvalError):
    """The field configuration could not be parsed."""

    code = "invalid-field-config"
    message = "The field configuration is invalid."


class DuplicateFieldError(FormvalError):
    code = "duplicate-field"
    message = "You have tried to define more than one field with the same name."


class InvalidDataTypeError(FormvalError):
    code = "invalid-data-type"
    message = "The field type you entered is not valid!"


class InvalidTransformError(FormvalError):
    code = "invalid-transform"
    message = "The transform you have specified is invalid."


class InvalidValidationError(FormvalError):
    code = "invalid-validation"
    message = "The validation you have specified is invalid."


class InvalidOptionsError(FormvalError):
    code = "invalid-options"
    message = "The options given to a step are invalid."


class WrongDataTypeError(FormvalError):
    """A step was invoked on a field whose data type it does not accept."""

    code = "wrong-data-type"
    message = "The data type of the field is incorrect for this step."


class MissingFunctionError(FormvalError):
    code = "custom-no-function"
    message = "A function has not been provided to the custom step."


class InvalidCaseError(FormvalError):
    code = "str-case-invalid-case"
    message = "The string case you provided is invalid."


class InvalidRegexpError(FormvalError):
    code = "invalid-regexp"
    message = "The regular expression you provided is invalid."


class InvalidListError(FormvalError):
    code = "in-list-invalid-list"
    message = "The list you provided is invalid."


class InvalidMatchFieldError(FormvalError):
    code = "match-field-invalid-field"
    message = "The match field you provided is invalid."


class ClientVersionError(FormvalError):
    """The submitting client collector is out of date."""

    code = "client-version-mismatch"
    message = "The form was submitted by an out of date client."


class UnknownFormatterError(FormvalError):
    code = "unknown-formatter"
    message = "The formatter you requested does not exist."
