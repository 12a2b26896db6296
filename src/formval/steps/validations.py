"""
Built-in validations.

Each validation returns ``(passed, reason)`` where ``reason`` is a short
machine-readable string such as ``too-small`` or ``invalid``. Apart from
``required``, validations pass without looking at the value when the field
is optional and empty.
"""

import math
import re
from typing import Any

from pydantic import Field

from formval.context import FieldContext
from formval.errors import InvalidListError, InvalidMatchFieldError, MissingFunctionError
from formval.formatters import parse_telephone
from formval.steps.base import Registry, StepOptions, Validation, maybe_await
from formval.steps.transforms import TEXT_TYPES, compile_pattern
from formval.strength import PasswordRequirements, RequirementChecker, StrengthReport
from formval.types import DataType, is_populated, to_text

_EMAIL = re.compile(r"^[\w!#$%&'*+\-/=?^`{|}~.]+@[\w\-]+(?:\.[\w\-]+)+$")
_URL = re.compile(
    r"^(?:(?P<protocol>[a-z][a-z0-9+.\-]*)://)?"
    r"(?:[^\s:@/]+(?::[^\s@/]*)?@)?"
    r"(?P<host>localhost"
    r"|(?:[a-z0-9_](?:[a-z0-9_\-]*[a-z0-9_])?\.)+[a-z]{2,}"
    r"|\d{1,3}(?:\.\d{1,3}){3})"
    r"(?::\d{1,5})?"
    r"(?:[/?#]\S*)?$",
    re.IGNORECASE,
)

_default_checker = RequirementChecker()


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def loose_equals(a: Any, b: Any) -> bool:
    """Equality that ignores representation, e.g. ``15 == "15"``."""
    if a == b:
        return True
    if a is None or b is None:
        return False
    number_a, number_b = _as_number(a), _as_number(b)
    if number_a is not None and number_b is not None:
        return number_a == number_b
    return to_text(a) == to_text(b)


class RequiredValidation(Validation):
    """The field must hold a value appropriate to its data type."""

    name = "required"
    skip_when_empty = False

    def check(self, ctx: FieldContext, options: StepOptions):
        if not is_populated(ctx.data_type, ctx.value):
            return False, "required"
        return True, None


class StrLengthValidation(Validation):
    name = "str-length"
    allowed_data_types = frozenset({DataType.STRING, DataType.EMAIL, DataType.PASSWORD})

    class Options(StepOptions):
        min: int | None = None
        max: int | None = None

    def check(self, ctx: FieldContext, options: Options):
        length = len(to_text(ctx.value))
        if options.min is not None and length < options.min:
            return False, "too-short"
        if options.max is not None and length > options.max:
            return False, "too-long"
        return True, None


class NumericValidation(Validation):
    """
    Range checks on a number.

    ``allow_zero=False`` rejects zero before the range is looked at.
    """

    name = "numeric"
    allowed_data_types = frozenset({DataType.INT, DataType.FLOAT})

    class Options(StepOptions):
        min: float | None = None
        max: float | None = None
        allow_zero: bool = True

    def check(self, ctx: FieldContext, options: Options):
        value = ctx.value
        if not isinstance(value, (int, float)) or isinstance(value, bool) or not math.isfinite(value):
            return False, "not-a-number"
        if not options.allow_zero and value == 0:
            return False, "zero-not-allowed"
        if options.min is not None and value < options.min:
            return False, "too-small"
        if options.max is not None and value > options.max:
            return False, "too-large"
        return True, None


class RegexpValidation(Validation):
    """The value must contain a match for ``test``; strings match literally."""

    name = "regexp"
    allowed_data_types = TEXT_TYPES | {DataType.PASSWORD}
    primary_option = "test"

    class Options(StepOptions):
        test: Any = None
        flags: str | None = None

    def check_options(self, options: Options) -> None:
        compile_pattern(options.test, options.flags)

    def check(self, ctx: FieldContext, options: Options):
        pattern = compile_pattern(options.test, options.flags)
        if not pattern.search(to_text(ctx.value)):
            return False, "invalid"
        return True, None


class InListValidation(Validation):
    name = "in-list"
    primary_option = "list"

    class Options(StepOptions):
        items: Any = Field(default=None, alias="list")

    def check_options(self, options: Options) -> None:
        if not isinstance(options.items, (list, tuple, set, frozenset)):
            raise InvalidListError(list=options.items)

    def check(self, ctx: FieldContext, options: Options):
        if ctx.value not in options.items:
            return False, "not-in-list"
        return True, None


class MatchFieldValidation(Validation):
    """
    The value must equal another field's current value.

    The other field is read when this step runs. A field defined earlier
    has finished its whole pipeline by then, after-transforms included; one
    defined later still holds its starting value.
    """

    name = "match-field"
    primary_option = "match_field"

    class Options(StepOptions):
        match_field: str | None = None
        strict: bool = False

    def check_options(self, options: Options) -> None:
        if not options.match_field:
            raise InvalidMatchFieldError(match_field=options.match_field)

    def check(self, ctx: FieldContext, options: Options):
        other = ctx.sibling(options.match_field)
        if other is None:
            raise InvalidMatchFieldError(
                f"The match field '{options.match_field}' is not defined on this form.",
                match_field=options.match_field,
            )

        if not loose_equals(ctx.value, other.value):
            return False, "no-match"

        strict_match = (
            type(ctx.value) is type(other.value)
            and ctx.value == other.value
            and ctx.data_type is other.data_type
        )
        if options.strict and not strict_match:
            return False, "loose-match"
        return True, None


class EmailValidation(Validation):
    name = "email"
    allowed_data_types = frozenset({DataType.EMAIL})

    def check(self, ctx: FieldContext, options: StepOptions):
        if not _EMAIL.match(to_text(ctx.value)):
            return False, "invalid"
        return True, None


class UrlValidation(Validation):
    """A URL; the protocol is required unless ``require_protocol`` is off."""

    name = "url"
    allowed_data_types = frozenset({DataType.URL})
    primary_option = "require_protocol"

    class Options(StepOptions):
        require_protocol: bool | None = None  # None = form setting

    def check(self, ctx: FieldContext, options: Options):
        match = _URL.match(to_text(ctx.value))
        if not match:
            return False, "invalid"

        require_protocol = options.require_protocol
        if require_protocol is None:
            require_protocol = ctx.settings.urls_require_protocol
        if require_protocol and not match.group("protocol"):
            return False, "protocol-required"
        return True, None


class TelephoneValidation(Validation):
    """
    A local (``07912345678``) or international (``+44.7912345678``) number.

    International numbers drop the leading zero, so both digit limits are
    lowered by one for them.
    """

    name = "telephone"
    allowed_data_types = frozenset({DataType.TELEPHONE})

    class Options(StepOptions):
        min_digits: int | None = 1
        max_digits: int | None = None

    def check(self, ctx: FieldContext, options: Options):
        parsed = parse_telephone(to_text(ctx.value))
        if parsed is None:
            return False, "invalid"

        min_digits, max_digits = options.min_digits, options.max_digits
        if parsed.is_international:
            if min_digits is not None and min_digits > 1:
                min_digits -= 1
            if max_digits:
                max_digits -= 1

        if min_digits is not None and len(parsed.digits) < min_digits:
            return False, "too-short"
        if max_digits is not None and len(parsed.digits) > max_digits:
            return False, "too-long"
        return True, None


class HashValidation(Validation):
    """Checks on a set of boolean selections."""

    name = "hash"
    allowed_data_types = frozenset({DataType.HASH})
    primary_option = "valid_keys"

    class Options(StepOptions):
        valid_keys: list[str] | None = None
        min_selections: int | None = None
        max_selections: int | None = None

    def check(self, ctx: FieldContext, options: Options):
        selections = ctx.value or {}
        if options.valid_keys is not None:
            if any(key not in options.valid_keys for key in selections):
                return False, "invalid-key"

        selected = sum(1 for value in selections.values() if value)
        if options.min_selections is not None and selected < options.min_selections:
            return False, "too-few"
        if options.max_selections is not None and selected > options.max_selections:
            return False, "too-many"
        return True, None


class PasswordValidation(Validation):
    """Delegates scoring to the form's password checker."""

    name = "password"
    allowed_data_types = frozenset({DataType.PASSWORD})

    class Options(StepOptions):
        requirements: PasswordRequirements = Field(default_factory=PasswordRequirements)
        min_score: int = 0

    async def check(self, ctx: FieldContext, options: Options):
        checker = ctx.settings.password_checker or _default_checker
        report = await maybe_await(
            checker.check(to_text(ctx.value), options.requirements, options.min_score)
        )
        if isinstance(report, StrengthReport):
            return report.passed, report.reason
        return report


class CustomValidation(Validation):
    """
    Run a caller-supplied function: ``fn(value, data_type, is_required)``.

    The function may be sync or async and returns a bool, a
    ``(passed, reason)`` tuple or a ``StepResult``.
    """

    name = "custom"
    primary_option = "fn"

    class Options(StepOptions):
        fn: Any = None

    def check_options(self, options: Options) -> None:
        if not callable(options.fn):
            raise MissingFunctionError(step=self.name, kind=self.kind)

    def check(self, ctx: FieldContext, options: Options):
        return options.fn(ctx.value, ctx.data_type, ctx.required)


VALIDATIONS = Registry(
    [
        RequiredValidation(),
        StrLengthValidation(),
        NumericValidation(),
        RegexpValidation(),
        InListValidation(),
        MatchFieldValidation(),
        EmailValidation(),
        UrlValidation(),
        TelephoneValidation(),
        HashValidation(),
        PasswordValidation(),
        CustomValidation(),
    ],
    kind="validation",
)
