"""
Built-in transforms.

Each transform receives the field context and its resolved options and
returns the field's new value.
"""

import base64
import hashlib
import re
import secrets
from typing import Any, Literal

from formval.context import FieldContext
from formval.errors import (
    InvalidCaseError,
    InvalidOptionsError,
    InvalidRegexpError,
    MissingFunctionError,
)
from formval.formatters import TELEPHONE_FORMATS, format_telephone, format_url
from formval.steps.base import Registry, StepOptions, Transform
from formval.types import DataType, to_text

TEXT_TYPES = frozenset({
    DataType.STRING,
    DataType.EMAIL,
    DataType.TELEPHONE,
    DataType.URL,
})

_REGEXP_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "u": 0,  # str patterns are always unicode
    "g": 0,  # handled as the replace count
}


def compile_pattern(pattern: Any, flags: str | None = None) -> re.Pattern:
    """Compile a step's ``find``/``test`` option.

    Strings are matched literally; compiled patterns are used as they are.

    Raises:
        InvalidRegexpError: If no usable pattern was given.
    """
    if isinstance(pattern, re.Pattern):
        return pattern
    if not isinstance(pattern, str):
        raise InvalidRegexpError(pattern=pattern, flags=flags)

    re_flags = 0
    for letter in flags or "":
        try:
            re_flags |= _REGEXP_FLAGS[letter]
        except KeyError:
            raise InvalidRegexpError(
                f"Unknown regular expression flag '{letter}'.",
                pattern=pattern,
                flags=flags,
            ) from None
    return re.compile(re.escape(pattern), re_flags)


class CustomTransform(Transform):
    """
    Run a caller-supplied function: ``fn(value, data_type)``.

    The function may be sync or async and returns the new value.
    """

    name = "custom"
    primary_option = "fn"

    class Options(StepOptions):
        fn: Any = None

    def check_options(self, options: Options) -> None:
        if not callable(options.fn):
            raise MissingFunctionError(step=self.name, kind=self.kind)

    def transform(self, ctx: FieldContext, options: Options) -> Any:
        return options.fn(ctx.value, ctx.data_type)


class Md5Transform(Transform):
    """Hash the string form of the value, optionally salted."""

    name = "md5"
    primary_option = "encoding"

    class Options(StepOptions):
        encoding: Literal["hex", "base64", "latin1", "binary"] = "hex"
        seed: Any = None
        random: bool = False

    def transform(self, ctx: FieldContext, options: Options) -> str:
        payload = to_text(ctx.value)
        if options.seed:
            payload += to_text(options.seed)
        if options.random:
            payload += secrets.token_hex(16)

        digest = hashlib.md5(payload.encode("utf-8"))
        if options.encoding == "hex":
            return digest.hexdigest()
        if options.encoding == "base64":
            return base64.b64encode(digest.digest()).decode("ascii")
        return digest.digest().decode("latin-1")


class StrTrimTransform(Transform):
    name = "str-trim"
    allowed_data_types = TEXT_TYPES | {DataType.PASSWORD}

    def transform(self, ctx: FieldContext, options: StepOptions) -> str:
        return ctx.value.strip()


class StrCaseTransform(Transform):
    """Change the case of a string: ``lower``, ``upper`` or ``capitalise``."""

    name = "str-case"
    allowed_data_types = frozenset({DataType.STRING})
    primary_option = "case"

    class Options(StepOptions):
        case: str | None = None

    def check_options(self, options: Options) -> None:
        if options.case not in ("lower", "upper", "capitalise", "capitalize"):
            raise InvalidCaseError(case=options.case)

    def transform(self, ctx: FieldContext, options: Options) -> str:
        if options.case == "lower":
            return ctx.value.lower()
        if options.case == "upper":
            return ctx.value.upper()
        return re.sub(r"(?:^|\s)\S", lambda m: m.group(0).upper(), ctx.value.lower())


class StrCollapseWhitespaceTransform(Transform):
    name = "str-collapse-whitespace"
    allowed_data_types = frozenset({DataType.STRING})

    def transform(self, ctx: FieldContext, options: StepOptions) -> str:
        return re.sub(r"\s+", " ", ctx.value)


class StrBrToLineBreakTransform(Transform):
    name = "str-br-to-line-break"
    allowed_data_types = frozenset({DataType.STRING})

    def transform(self, ctx: FieldContext, options: StepOptions) -> str:
        return re.sub(r"<br\s*/?>", "\n", ctx.value, flags=re.IGNORECASE)


class StrLineBreakToBrTransform(Transform):
    name = "str-line-break-to-br"
    allowed_data_types = frozenset({DataType.STRING})

    def transform(self, ctx: FieldContext, options: StepOptions) -> str:
        return re.sub(r"\r?\n", "<br>", ctx.value)


class StrReplaceTransform(Transform):
    """
    Replace matches of ``find`` with ``replace``.

    A string ``find`` is matched literally and only its first occurrence is
    replaced unless ``flags`` contains ``g``. ``replace`` follows
    ``re.sub`` rules, so it may be a template or a function.
    """

    name = "str-replace"
    allowed_data_types = TEXT_TYPES
    primary_option = "find"

    class Options(StepOptions):
        find: Any = None
        flags: str | None = None
        replace: Any = ""

    def check_options(self, options: Options) -> None:
        compile_pattern(options.find, options.flags)

    def transform(self, ctx: FieldContext, options: Options) -> str:
        pattern = compile_pattern(options.find, options.flags)
        count = 0 if "g" in (options.flags or "") else 1
        return pattern.sub(options.replace if options.replace is not None else "", ctx.value, count=count)


class TelephoneTransform(Transform):
    """Re-format a telephone number; see ``formval.formatters``."""

    name = "telephone"
    allowed_data_types = frozenset({DataType.TELEPHONE})
    primary_option = "format"

    class Options(StepOptions):
        format: str = "basic"
        pattern: str | None = None
        international: bool = False
        country_code: str | None = None

    def check_options(self, options: Options) -> None:
        if options.pattern is None and options.format not in TELEPHONE_FORMATS:
            raise InvalidOptionsError(
                f"Unknown telephone format '{options.format}'.",
                step=self.name,
                valid_formats=sorted(TELEPHONE_FORMATS),
            )

    def transform(self, ctx: FieldContext, options: Options) -> str:
        return format_telephone(
            ctx.value,
            format=options.format,
            pattern=options.pattern,
            international=options.international,
            country_code=options.country_code or ctx.settings.default_country_code,
        )


class UrlTransform(Transform):
    """Prefix a protocol to URLs that do not have one."""

    name = "url"
    allowed_data_types = frozenset({DataType.URL})
    primary_option = "protocol"

    class Options(StepOptions):
        protocol: str | None = None

    def transform(self, ctx: FieldContext, options: Options) -> str:
        return format_url(ctx.value, options.protocol or ctx.settings.default_url_protocol)


TRANSFORMS = Registry(
    [
        CustomTransform(),
        Md5Transform(),
        StrTrimTransform(),
        StrCaseTransform(),
        StrCollapseWhitespaceTransform(),
        StrBrToLineBreakTransform(),
        StrLineBreakToBrTransform(),
        StrReplaceTransform(),
        TelephoneTransform(),
        UrlTransform(),
    ],
    kind="transform",
)
