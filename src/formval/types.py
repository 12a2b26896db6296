"""
Type registry for formval.

Maps the data type aliases callers use when defining fields onto the
canonical ``DataType`` members, and supplies per-type defaults, coercion,
display strings and the "is populated" check used by ``required``.
"""

import math
import re
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

from pydantic import TypeAdapter, ValidationError

from formval.errors import InvalidDataTypeError


class DataType(str, Enum):
    """Canonical field data types."""

    STRING = "string"
    INT = "int"
    FLOAT = "float"
    EMAIL = "email"
    TELEPHONE = "telephone"
    URL = "url"
    BOOLEAN = "boolean"
    CHECKBOX = "checkbox"
    PASSWORD = "password"
    HASH = "hash"


ALIASES: dict[str, DataType] = {
    "string": DataType.STRING,
    "str": DataType.STRING,
    "number": DataType.INT,
    "int": DataType.INT,
    "integer": DataType.INT,
    "float": DataType.FLOAT,
    "email": DataType.EMAIL,
    "telephone": DataType.TELEPHONE,
    "tel": DataType.TELEPHONE,
    "url": DataType.URL,
    "boolean": DataType.BOOLEAN,
    "bool": DataType.BOOLEAN,
    "checkbox": DataType.CHECKBOX,
    "password": DataType.PASSWORD,
    "hash": DataType.HASH,
}

STRING_TYPES = frozenset({
    DataType.STRING,
    DataType.EMAIL,
    DataType.TELEPHONE,
    DataType.URL,
    DataType.PASSWORD,
})
NUMERIC_TYPES = frozenset({DataType.INT, DataType.FLOAT})

# pydantic's lax bool parsing: true/false, yes/no, on/off, y/n, t/f, 1/0.
_BOOL = TypeAdapter(bool)

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def normalize(data_type: "str | DataType") -> DataType:
    """Return the canonical data type for an alias.

    Raises:
        InvalidDataTypeError: If the alias is not recognised.
    """
    if isinstance(data_type, DataType):
        return data_type
    try:
        return ALIASES[data_type]
    except (KeyError, TypeError):
        raise InvalidDataTypeError(
            data_type=data_type,
            valid_types=sorted(ALIASES),
        ) from None


def default_value_for(data_type: DataType) -> Any:
    """Return the value used when the raw input has no entry for a field."""
    if data_type in STRING_TYPES:
        return ""
    if data_type is DataType.CHECKBOX:
        return False
    if data_type is DataType.HASH:
        return {}
    # Numeric and boolean fields start out unset.
    return None


def to_text(raw: Any) -> str:
    """Cast a raw input value to a string the way a browser would."""
    if raw is None:
        return ""
    if isinstance(raw, bool):
        return "true" if raw else "false"
    if isinstance(raw, float) and math.isfinite(raw) and raw.is_integer():
        return str(int(raw))
    if isinstance(raw, (list, tuple)):
        return ",".join(to_text(item) for item in raw)
    return str(raw)


def parse_int(raw: Any) -> "int | float":
    """Parse the leading integer of a value, returning NaN on failure."""
    if isinstance(raw, bool):
        return math.nan
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if math.isfinite(raw) else math.nan
    match = _INT_PREFIX.match(to_text(raw))
    return int(match.group(1)) if match else math.nan


def parse_float(raw: Any) -> float:
    """Parse the leading number of a value, returning NaN on failure."""
    if isinstance(raw, bool):
        return math.nan
    if isinstance(raw, (int, float)):
        return float(raw)
    match = _FLOAT_PREFIX.match(to_text(raw))
    return float(match.group(1)) if match else math.nan


def parse_bool(raw: Any) -> bool | None:
    """Permissive boolean parse; unknown tokens give ``None``."""
    if isinstance(raw, bool) or raw is None:
        return raw
    if isinstance(raw, (int, float)):
        return bool(raw)
    token = to_text(raw).strip()
    if not token:
        return False
    try:
        return _BOOL.validate_python(token)
    except ValidationError:
        return None


def parse_checkbox(raw: Any, true_value: str = "ON") -> bool:
    """A checkbox is ticked only for a truthy token or the configured true value."""
    if isinstance(raw, str) and raw.strip().upper() == true_value.upper():
        return True
    return parse_bool(raw) is True


def coerce(data_type: DataType, raw: Any, checkbox_true_value: str = "ON") -> Any:
    """Cast a raw value into the representation of ``data_type``."""
    if data_type in STRING_TYPES:
        return to_text(raw)
    if data_type is DataType.INT:
        return parse_int(raw)
    if data_type is DataType.FLOAT:
        return parse_float(raw)
    if data_type is DataType.BOOLEAN:
        return parse_bool(raw)
    if data_type is DataType.CHECKBOX:
        return parse_checkbox(raw, checkbox_true_value)
    if data_type is DataType.HASH:
        if not isinstance(raw, Mapping):
            return {}
        return {str(key): parse_checkbox(value, checkbox_true_value) for key, value in raw.items()}
    raise InvalidDataTypeError(data_type=data_type)


def to_display(data_type: DataType, value: Any) -> str:
    """Canonical string form of a coerced value."""
    if data_type in NUMERIC_TYPES:
        if not isinstance(value, (int, float)) or not math.isfinite(value):
            return ""
        return str(value) if data_type is DataType.INT else repr(float(value))
    if data_type in (DataType.BOOLEAN, DataType.CHECKBOX):
        if value is None:
            return ""
        return "true" if value else "false"
    if data_type is DataType.HASH:
        return ",".join(key for key, selected in (value or {}).items() if selected)
    return to_text(value)


def _is_finite_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


_POPULATED: dict[DataType, Callable[[Any], bool]] = {
    DataType.STRING: bool,
    DataType.EMAIL: bool,
    DataType.TELEPHONE: bool,
    DataType.URL: bool,
    DataType.PASSWORD: bool,
    DataType.INT: _is_finite_number,
    DataType.FLOAT: _is_finite_number,
    DataType.BOOLEAN: lambda value: value is True or value is False,
    DataType.CHECKBOX: lambda value: value is True,
    DataType.HASH: lambda value: isinstance(value, Mapping) and any(value.values()),
}


def is_populated(data_type: DataType, value: Any) -> bool:
    """Whether ``value`` counts as present for a field of ``data_type``."""
    return _POPULATED[data_type](value)
