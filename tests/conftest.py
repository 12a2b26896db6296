"""Shared fixtures for formval tests."""

import dataclasses

import pytest

from formval import config as config_module
from formval.context import FieldContext, FormSettings
from formval.tracing import setup_tracing
from formval.types import DataType


@pytest.fixture(autouse=True)
def restore_config():
    """Undo any update_config() a test made."""
    saved = dataclasses.replace(config_module.config)
    yield
    config_module.config = saved


@pytest.fixture(autouse=True)
def no_tracing():
    yield
    setup_tracing(enabled=False)


@pytest.fixture
def make_ctx():
    """Build a FieldContext for calling a step directly."""

    def _make(value, data_type=DataType.STRING, required=False, **kwargs):
        return FieldContext(
            field_name=kwargs.pop("field_name", "field"),
            data_type=data_type,
            required=required,
            value=value,
            raw_value=kwargs.pop("raw_value", value),
            settings=kwargs.pop("settings", FormSettings()),
            **kwargs,
        )

    return _make
