"""Tests for the formval type registry."""

import math

import pytest

from formval.errors import InvalidDataTypeError
from formval.types import (
    DataType,
    coerce,
    default_value_for,
    is_populated,
    normalize,
    parse_bool,
    parse_float,
    parse_int,
    to_display,
)


class TestNormalize:
    """Tests for data type aliases."""

    @pytest.mark.parametrize("alias,expected", [
        ("str", DataType.STRING),
        ("number", DataType.INT),
        ("integer", DataType.INT),
        ("tel", DataType.TELEPHONE),
        ("bool", DataType.BOOLEAN),
        ("hash", DataType.HASH),
        (DataType.URL, DataType.URL),
    ])
    def test_aliases(self, alias, expected):
        """Test aliases resolve to their canonical type."""
        assert normalize(alias) is expected

    def test_unknown_alias(self):
        """Test unknown aliases are fatal and list the valid types."""
        with pytest.raises(InvalidDataTypeError) as exc_info:
            normalize("colour")
        assert "str" in exc_info.value.details["valid_types"]
        assert exc_info.value.code == "invalid-data-type"


class TestParsing:
    """Tests for raw value parsing."""

    def test_parse_int_leading_digits(self):
        """Test the leading integer is used."""
        assert parse_int("42px") == 42
        assert parse_int(" -7") == -7
        assert parse_int(3.9) == 3

    def test_parse_int_failure_is_nan(self):
        """Test unparseable input gives NaN."""
        assert math.isnan(parse_int("px"))
        assert math.isnan(parse_int(None))
        assert math.isnan(parse_int(True))

    def test_parse_float(self):
        """Test the leading number is used."""
        assert parse_float("3.5abc") == 3.5
        assert parse_float("1e3") == 1000.0
        assert math.isnan(parse_float("abc"))

    @pytest.mark.parametrize("raw,expected", [
        ("yes", True),
        ("TRUE", True),
        ("off", False),
        ("", False),
        ("maybe", None),
        (" On ", True),
        ("N", False),
        ("2", None),
        (None, None),
        (0, False),
        (2, True),
    ])
    def test_parse_bool(self, raw, expected):
        """Test permissive boolean parsing."""
        assert parse_bool(raw) is expected


class TestCoerce:
    """Tests for coercion into each data type."""

    def test_string_types(self):
        """Test string-like types become strings."""
        assert coerce(DataType.STRING, 15) == "15"
        assert coerce(DataType.EMAIL, None) == ""
        assert coerce(DataType.PASSWORD, 2.0) == "2"

    def test_numbers(self):
        """Test numeric types parse their input."""
        assert coerce(DataType.INT, "15") == 15
        assert coerce(DataType.FLOAT, "2.5") == 2.5
        assert math.isnan(coerce(DataType.INT, "abc"))

    def test_checkbox(self):
        """Test checkboxes match the configured true value."""
        assert coerce(DataType.CHECKBOX, "on") is True
        assert coerce(DataType.CHECKBOX, "checked", "checked") is True
        assert coerce(DataType.CHECKBOX, "nope") is False

    def test_hash(self):
        """Test hash values become key to bool mappings."""
        assert coerce(DataType.HASH, {"red": "ON", "blue": ""}) == {"red": True, "blue": False}
        assert coerce(DataType.HASH, "red") == {}


class TestDefaults:
    """Tests for per-type default values."""

    def test_default_values(self):
        """Test each family of types gets its own default."""
        assert default_value_for(DataType.STRING) == ""
        assert default_value_for(DataType.CHECKBOX) is False
        assert default_value_for(DataType.HASH) == {}
        assert default_value_for(DataType.INT) is None
        assert default_value_for(DataType.BOOLEAN) is None


class TestDisplay:
    """Tests for canonical display strings."""

    def test_numbers(self):
        """Test numbers and NaN."""
        assert to_display(DataType.INT, 5) == "5"
        assert to_display(DataType.FLOAT, 2.0) == "2.0"
        assert to_display(DataType.INT, math.nan) == ""

    def test_booleans(self):
        """Test booleans and unset booleans."""
        assert to_display(DataType.BOOLEAN, True) == "true"
        assert to_display(DataType.CHECKBOX, False) == "false"
        assert to_display(DataType.BOOLEAN, None) == ""

    def test_hash(self):
        """Test only selected keys are listed."""
        assert to_display(DataType.HASH, {"a": True, "b": False, "c": True}) == "a,c"

    def test_display_round_trips_through_coerce(self):
        """Test a displayed value coerces back to itself."""
        for data_type, value in [
            (DataType.INT, 42),
            (DataType.FLOAT, 2.5),
            (DataType.BOOLEAN, False),
            (DataType.STRING, "text"),
        ]:
            assert coerce(data_type, to_display(data_type, value)) == value


class TestIsPopulated:
    """Tests for the type-aware emptiness check."""

    @pytest.mark.parametrize("data_type", [
        DataType.STRING,
        DataType.EMAIL,
        DataType.TELEPHONE,
        DataType.URL,
        DataType.PASSWORD,
    ])
    def test_string_types(self, data_type):
        """Test strings are populated when non-empty."""
        assert is_populated(data_type, "x")
        assert not is_populated(data_type, "")

    @pytest.mark.parametrize("data_type", [DataType.INT, DataType.FLOAT])
    def test_numbers(self, data_type):
        """Test zero counts as populated but NaN does not."""
        assert is_populated(data_type, 0)
        assert is_populated(data_type, -1.5)
        assert not is_populated(data_type, math.nan)
        assert not is_populated(data_type, None)

    def test_boolean(self):
        """Test False is an answer, None is not."""
        assert is_populated(DataType.BOOLEAN, False)
        assert is_populated(DataType.BOOLEAN, True)
        assert not is_populated(DataType.BOOLEAN, None)

    def test_checkbox(self):
        """Test only a ticked checkbox is populated."""
        assert is_populated(DataType.CHECKBOX, True)
        assert not is_populated(DataType.CHECKBOX, False)

    def test_hash(self):
        """Test a hash needs at least one selection."""
        assert is_populated(DataType.HASH, {"a": False, "b": True})
        assert not is_populated(DataType.HASH, {"a": False})
        assert not is_populated(DataType.HASH, {})

    def test_every_type_is_covered(self):
        """Test no data type is missing a predicate."""
        for data_type in DataType:
            is_populated(data_type, None)
