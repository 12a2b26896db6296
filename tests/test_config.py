"""Tests for formval configuration."""

import pytest

from formval import Form
from formval.config import FormvalConfig, get_config, update_config


class TestFormvalConfig:
    """Tests for FormvalConfig."""

    def test_defaults(self):
        """Test the built-in defaults."""
        config = FormvalConfig()
        assert config.stop_on_invalid is True
        assert config.checkbox_true_value == "ON"
        assert config.client_version_field == "__FovalClientVersion"
        assert config.expected_client_version is None
        assert config.server_port == 9110

    def test_from_env(self, monkeypatch):
        """Test environment variables override the defaults."""
        monkeypatch.setenv("FORMVAL_STOP_ON_INVALID", "false")
        monkeypatch.setenv("FORMVAL_PORT", "8000")
        monkeypatch.setenv("FORMVAL_CLIENT_VERSION", "3.1")
        monkeypatch.setenv("FORMVAL_COUNTRY_CODE", "1")

        config = FormvalConfig.from_env()

        assert config.stop_on_invalid is False
        assert config.server_port == 8000
        assert config.expected_client_version == "3.1"
        assert config.default_country_code == "1"

    def test_update_config(self):
        """Test updates apply to the shared config and unknown keys are ignored."""
        update_config(checkbox_true_value="YES", not_a_setting=True)
        assert get_config().checkbox_true_value == "YES"
        assert not hasattr(get_config(), "not_a_setting")


class TestFormSettings:
    """Tests for how forms pick up configuration."""

    def test_form_uses_config(self):
        """Test forms default to the shared config."""
        update_config(stop_on_invalid=False, default_country_code="353")
        settings = Form({}).settings
        assert settings.stop_on_invalid is False
        assert settings.default_country_code == "353"

    def test_form_overrides_config(self):
        """Test explicit form options win over the config."""
        update_config(stop_on_invalid=False)
        assert Form({}, stop_on_invalid=True).settings.stop_on_invalid is True

    def test_client_version_from_config(self):
        """Test the expected client version can come from config."""
        from formval.errors import ClientVersionError

        update_config(expected_client_version="2", client_version_field="v")
        with pytest.raises(ClientVersionError):
            Form({"v": "1"})
