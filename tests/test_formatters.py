"""Tests for value formatters."""

import pytest

from formval.errors import InvalidOptionsError, UnknownFormatterError
from formval.formatters import format, format_telephone, format_url, parse_telephone


class TestParseTelephone:
    """Tests for splitting telephone numbers."""

    def test_international(self):
        """Test the country code is separated from the number."""
        parsed = parse_telephone("+44.7912345678")
        assert parsed.country_code == "44"
        assert parsed.digits == "7912345678"
        assert parsed.is_international

    def test_local(self):
        """Test punctuation is dropped and the zero removed nationally."""
        parsed = parse_telephone("(07912) 345-678")
        assert parsed.country_code is None
        assert parsed.digits == "07912345678"
        assert parsed.national_digits == "7912345678"

    def test_not_a_number(self):
        """Test text is rejected."""
        assert parse_telephone("ring ring") is None


class TestFormatTelephone:
    """Tests for telephone formatting."""

    def test_basic(self):
        """Test the basic format in both styles."""
        assert format_telephone("+44.7912345678", international=True) == "+447912345678"
        assert format_telephone("+44.7912345678", international=False) == "07912345678"

    def test_uk_formats(self):
        """Test the named UK layouts."""
        assert format_telephone("07912345678", "uk-local") == "07912 345678"
        assert format_telephone("07912345678", "uk-mobile") == "07912 345 678"
        assert format_telephone("07912345678", "uk-mobile", international=True, country_code="44") == "+447912 345 678"

    def test_custom_pattern(self):
        """Test a caller-supplied pattern keeps unconsumed digits."""
        assert format_telephone("07912345678", pattern="({ZERO}{3}) {3}-") == "(0791) 234-5678"

    def test_unparseable_unchanged(self):
        """Test values that are not numbers pass through."""
        assert format_telephone("ask for Bob") == "ask for Bob"

    def test_unknown_format(self):
        """Test an unknown named format is fatal."""
        with pytest.raises(InvalidOptionsError):
            format_telephone("07912345678", "us-local")


class TestFormatUrl:
    """Tests for url formatting."""

    def test_adds_protocol(self):
        """Test a missing protocol is added."""
        assert format_url("example.com") == "http://example.com"
        assert format_url("example.com", "https://") == "https://example.com"
        assert format_url("//cdn.example.com/x.js", "https") == "https://cdn.example.com/x.js"

    def test_keeps_protocol(self):
        """Test an existing protocol is left alone."""
        assert format_url("ftp://example.com") == "ftp://example.com"
        assert format_url("") == ""


class TestFormat:
    """Tests for the format() entry point."""

    def test_named_formatter(self):
        """Test options accept camelCase keys."""
        assert format("07912345678", "telephone", {"international": True, "countryCode": "44"}) == "+447912345678"
        assert format("example.com", "url") == "http://example.com"

    def test_unknown_formatter(self):
        """Test an unknown formatter name is fatal."""
        with pytest.raises(UnknownFormatterError):
            format("x", "postcode")

    def test_unknown_option(self):
        """Test an option the formatter does not take."""
        with pytest.raises(InvalidOptionsError):
            format("example.com", "url", {"scheme": "https"})
