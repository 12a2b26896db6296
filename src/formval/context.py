"""
Per-form settings and the read-only context handed to every step.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from formval.config import get_config
from formval.types import DataType, is_populated

if TYPE_CHECKING:
    from formval.strength import PasswordChecker


@dataclass(frozen=True)
class FormSettings:
    """Options that apply to every field of a form."""

    stop_on_invalid: bool = True
    checkbox_true_value: str = "ON"
    urls_require_protocol: bool = True
    default_country_code: str = "44"
    default_url_protocol: str = "http"
    password_checker: "PasswordChecker | None" = None

    @classmethod
    def from_config(cls, **overrides: Any) -> "FormSettings":
        """Build settings from the global config, ignoring ``None`` overrides."""
        config = get_config()
        values = {
            "stop_on_invalid": config.stop_on_invalid,
            "checkbox_true_value": config.checkbox_true_value,
            "urls_require_protocol": config.urls_require_protocol,
            "default_country_code": config.default_country_code,
            "default_url_protocol": config.default_url_protocol,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)


@dataclass(frozen=True)
class SiblingField:
    """Snapshot of another field of the same form."""

    value: Any
    data_type: DataType


@dataclass(frozen=True)
class FieldContext:
    """
    Immutable view of a field at the moment a step runs.

    ``siblings`` holds every other field's current value. Fields are
    processed in definition order, so a sibling defined earlier has finished
    its pipeline while one defined later still holds its starting value.
    """

    field_name: str
    data_type: DataType
    required: bool
    value: Any
    raw_value: Any
    settings: FormSettings = field(default_factory=FormSettings)
    siblings: Mapping[str, SiblingField] = field(
        default_factory=lambda: MappingProxyType({})
    )
    extra_data: Mapping[str, Any] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @property
    def is_empty(self) -> bool:
        return not is_populated(self.data_type, self.value)

    def sibling(self, field_name: str) -> SiblingField | None:
        return self.siblings.get(field_name)
