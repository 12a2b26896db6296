"""
Configuration module for formval.

Handles environment variables and default settings.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    return os.getenv(name, str(default).lower()).lower() == "true"


@dataclass
class FormvalConfig:
    """Configuration settings for formval."""

    # Validation defaults, overridable per Form
    stop_on_invalid: bool = True
    checkbox_true_value: str = "ON"
    urls_require_protocol: bool = True

    # Formatting defaults
    default_country_code: str = "44"
    default_url_protocol: str = "http"

    # Client collector handshake
    client_version_field: str = "__FovalClientVersion"
    expected_client_version: str | None = None

    # HTTP host settings
    server_host: str = "127.0.0.1"
    server_port: int = 9110
    log_level: str = "info"

    # Tracing settings
    enable_tracing: bool = False

    @classmethod
    def from_env(cls) -> "FormvalConfig":
        """
        Create configuration from environment variables.

        If an environment variable is not set, uses the class field default value.
        """
        _defaults = cls()

        return cls(
            stop_on_invalid=_env_bool("FORMVAL_STOP_ON_INVALID", _defaults.stop_on_invalid),
            checkbox_true_value=os.getenv("FORMVAL_CHECKBOX_TRUE_VALUE", _defaults.checkbox_true_value),
            urls_require_protocol=_env_bool("FORMVAL_URLS_REQUIRE_PROTOCOL", _defaults.urls_require_protocol),
            default_country_code=os.getenv("FORMVAL_COUNTRY_CODE", _defaults.default_country_code),
            default_url_protocol=os.getenv("FORMVAL_URL_PROTOCOL", _defaults.default_url_protocol),
            client_version_field=os.getenv("FORMVAL_CLIENT_VERSION_FIELD", _defaults.client_version_field),
            expected_client_version=os.getenv("FORMVAL_CLIENT_VERSION") or _defaults.expected_client_version,
            server_host=os.getenv("FORMVAL_HOST", _defaults.server_host),
            server_port=int(os.getenv("FORMVAL_PORT", str(_defaults.server_port))),
            log_level=os.getenv("FORMVAL_LOG_LEVEL", _defaults.log_level),
            enable_tracing=_env_bool("FORMVAL_ENABLE_TRACING", _defaults.enable_tracing),
        )


config = FormvalConfig.from_env()


def get_config() -> FormvalConfig:
    """Get the current configuration."""
    return config


def update_config(**kwargs) -> FormvalConfig:
    """Update configuration settings."""
    global config
    for key, value in kwargs.items():
        if hasattr(config, key):
            setattr(config, key, value)
    return config
