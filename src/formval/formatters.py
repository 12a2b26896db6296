"""
Value formatters.

Usable on their own or through the ``telephone`` and ``url`` transforms::

    from formval.formatters import format

    format("+44.7912345678", "telephone", {"format": "basic", "international": False})
    # '07912345678'

Telephone patterns are made of tokens processed left to right over a
shared queue of national digits (the leading zero removed):

- ``{CC}``   ``+<country code>`` for international output, nothing otherwise
- ``{ZERO}`` ``0`` for local output, nothing otherwise
- ``{N}``    the next N digits
- ``{REM}``  every remaining digit

Any other text in the pattern is copied as-is.
"""

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic.alias_generators import to_snake

from formval.config import get_config
from formval.errors import InvalidOptionsError, UnknownFormatterError

TELEPHONE_FORMATS: dict[str, str] = {
    "basic": "{CC}{ZERO}{REM}",
    "uk-local": "{CC}{ZERO}{4} {REM}",
    "uk-mobile": "{CC}{ZERO}{4} {3} {REM}",
}

_TELEPHONE = re.compile(
    r"^\s*(?:\+(?P<country_code>\d{1,4})[.\s-])?(?P<number>[\d\s().-]*\d[\d\s().-]*)$"
)
_TOKEN = re.compile(r"\{(CC|ZERO|REM|\d+)\}")
_PROTOCOL = re.compile(r"^[a-z][a-z0-9+.\-]*://", re.IGNORECASE)


@dataclass(frozen=True)
class ParsedTelephone:
    country_code: str | None
    digits: str

    @property
    def is_international(self) -> bool:
        return self.country_code is not None

    @property
    def national_digits(self) -> str:
        return self.digits[1:] if self.digits.startswith("0") else self.digits


def parse_telephone(value: Any) -> ParsedTelephone | None:
    """Split a telephone number into country code and digits.

    Accepts local numbers (``07912 345678``) and international numbers with
    a separator after the country code (``+44.7912345678``). Returns
    ``None`` when the value is not a telephone number.
    """
    match = _TELEPHONE.match(str(value))
    if not match:
        return None
    digits = re.sub(r"\D", "", match.group("number"))
    return ParsedTelephone(country_code=match.group("country_code"), digits=digits)


def format_telephone(
    value: Any,
    format: str = "basic",
    pattern: str | None = None,
    international: bool = False,
    country_code: str | None = None,
) -> str:
    """Re-format a telephone number. Unparseable values are returned unchanged."""
    parsed = parse_telephone(value)
    if parsed is None:
        return str(value)

    if pattern is None:
        try:
            pattern = TELEPHONE_FORMATS[format]
        except KeyError:
            raise InvalidOptionsError(
                f"Unknown telephone format '{format}'.",
                format=format,
                valid_formats=sorted(TELEPHONE_FORMATS),
            ) from None

    code = parsed.country_code or country_code or get_config().default_country_code
    queue = parsed.national_digits
    output: list[str] = []
    position = 0

    for match in _TOKEN.finditer(pattern):
        output.append(pattern[position:match.start()])
        token = match.group(1)
        if token == "CC":
            output.append(f"+{code}" if international else "")
        elif token == "ZERO":
            output.append("" if international else "0")
        elif token == "REM":
            output.append(queue)
            queue = ""
        else:
            width = int(token)
            output.append(queue[:width])
            queue = queue[width:]
        position = match.end()

    output.append(pattern[position:])
    # Digits the pattern did not consume are kept rather than dropped.
    output.append(queue)
    return "".join(output).strip()


def format_url(value: Any, protocol: str | None = None) -> str:
    """Prefix a protocol when the URL does not already have one."""
    url = str(value).strip()
    if not url or _PROTOCOL.match(url):
        return url
    protocol = (protocol or get_config().default_url_protocol).rstrip(":/")
    if url.startswith("//"):
        return f"{protocol}:{url}"
    return f"{protocol}://{url}"


FORMATTERS: dict[str, Callable[..., str]] = {
    "telephone": format_telephone,
    "url": format_url,
}


def format(value: Any, formatter_name: str, options: Mapping[str, Any] | None = None) -> str:
    """Format ``value`` with the named formatter.

    Option keys may be given in camelCase or snake_case.

    Raises:
        UnknownFormatterError: If no formatter has that name.
    """
    try:
        formatter = FORMATTERS[formatter_name]
    except KeyError:
        raise UnknownFormatterError(
            formatter=formatter_name,
            valid_formatters=sorted(FORMATTERS),
        ) from None

    kwargs = {to_snake(key): option for key, option in (options or {}).items()}
    try:
        return formatter(value, **kwargs)
    except TypeError as e:
        raise InvalidOptionsError(str(e), formatter=formatter_name, options=options) from e
