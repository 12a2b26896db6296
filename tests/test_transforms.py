"""Tests for the built-in transforms."""

import re

import pytest

from formval.context import FormSettings
from formval.errors import (
    InvalidCaseError,
    InvalidOptionsError,
    InvalidRegexpError,
    MissingFunctionError,
    WrongDataTypeError,
)
from formval.steps import TRANSFORMS, VALIDATIONS
from formval.types import DataType


async def run(name, ctx, raw_options=True):
    step = TRANSFORMS[name]
    return await step(ctx, step.resolve_options(raw_options))


class TestOptionResolution:
    """Tests for resolving shorthand options."""

    @pytest.mark.parametrize("raw", [None, False, 0, "", {"run": False}])
    def test_switched_off(self, raw):
        """Test falsy options and run=False disable the step."""
        assert TRANSFORMS["md5"].resolve_options(raw) is None

    def test_true_means_defaults(self):
        """Test True resolves to the default options."""
        options = TRANSFORMS["md5"].resolve_options(True)
        assert options.encoding == "hex"
        assert options.run is True

    def test_scalar_shorthand(self):
        """Test a scalar fills the primary option."""
        assert TRANSFORMS["md5"].resolve_options("base64").encoding == "base64"
        assert TRANSFORMS["str-case"].resolve_options("upper").case == "upper"

    def test_camel_case_keys(self):
        """Test camelCase option keys are accepted."""
        options = TRANSFORMS["telephone"].resolve_options({"countryCode": "1"})
        assert options.country_code == "1"

    def test_no_primary_option(self):
        """Test a truthy scalar on a step without a primary option runs it with defaults."""
        assert TRANSFORMS["str-trim"].resolve_options("yes") is not None
        assert VALIDATIONS["required"].resolve_options(1) is not None
        assert VALIDATIONS["required"].resolve_options(0) is None

    def test_unknown_option_key(self):
        """Test unknown option keys are rejected."""
        with pytest.raises(InvalidOptionsError):
            TRANSFORMS["md5"].resolve_options({"salt": "x"})

    def test_bad_option_value(self):
        """Test option values are validated."""
        with pytest.raises(InvalidOptionsError):
            TRANSFORMS["md5"].resolve_options("rot13")


class TestStringTransforms:
    """Tests for the str-* transforms."""

    @pytest.mark.asyncio
    async def test_trim(self, make_ctx):
        """Test trimming is idempotent."""
        once = await run("str-trim", make_ctx("  hello \n"))
        assert once == "hello"
        assert await run("str-trim", make_ctx(once)) == once

    @pytest.mark.asyncio
    async def test_trim_rejects_numbers(self, make_ctx):
        """Test str-trim on an int field is fatal."""
        with pytest.raises(WrongDataTypeError):
            await run("str-trim", make_ctx(5, DataType.INT))

    @pytest.mark.asyncio
    async def test_case(self, make_ctx):
        """Test each case option."""
        assert await run("str-case", make_ctx("Hello World"), "lower") == "hello world"
        assert await run("str-case", make_ctx("Hello World"), "upper") == "HELLO WORLD"
        assert await run("str-case", make_ctx("hELLO wORLD"), "capitalise") == "Hello World"

    def test_invalid_case(self):
        """Test an unknown case is fatal at definition time."""
        with pytest.raises(InvalidCaseError):
            TRANSFORMS["str-case"].resolve_options("title")

    @pytest.mark.asyncio
    async def test_collapse_whitespace(self, make_ctx):
        """Test runs of whitespace become one space."""
        assert await run("str-collapse-whitespace", make_ctx("a   b\n\t c")) == "a b c"

    @pytest.mark.asyncio
    async def test_line_breaks(self, make_ctx):
        """Test conversion between <br> and newlines."""
        assert await run("str-br-to-line-break", make_ctx("a<br/>b<BR>c<br />d")) == "a\nb\nc\nd"
        assert await run("str-line-break-to-br", make_ctx("a\r\nb\nc")) == "a<br>b<br>c"


class TestStrReplace:
    """Tests for the str-replace transform."""

    @pytest.mark.asyncio
    async def test_first_occurrence_only(self, make_ctx):
        """Test only the first match is replaced without the g flag."""
        result = await run("str-replace", make_ctx("banana"), {"find": "a", "replace": "o"})
        assert result == "bonana"

    @pytest.mark.asyncio
    async def test_global(self, make_ctx):
        """Test the g flag replaces every match."""
        result = await run("str-replace", make_ctx("banana"), {"find": "a", "replace": "o", "flags": "g"})
        assert result == "bonono"

    @pytest.mark.asyncio
    async def test_string_is_literal(self, make_ctx):
        """Test strings are not treated as patterns."""
        result = await run("str-replace", make_ctx("a.b.c"), {"find": ".", "replace": "-", "flags": "g"})
        assert result == "a-b-c"

    @pytest.mark.asyncio
    async def test_compiled_pattern(self, make_ctx):
        """Test a compiled pattern is used as a regular expression."""
        result = await run(
            "str-replace",
            make_ctx("order 123 of 456"),
            {"find": re.compile(r"\d+"), "replace": "#", "flags": "g"},
        )
        assert result == "order # of #"

    @pytest.mark.asyncio
    async def test_ignore_case(self, make_ctx):
        """Test the i flag."""
        result = await run("str-replace", make_ctx("Cat cat"), {"find": "CAT", "replace": "dog", "flags": "gi"})
        assert result == "dog dog"

    def test_missing_find(self):
        """Test a missing find option is fatal."""
        with pytest.raises(InvalidRegexpError):
            TRANSFORMS["str-replace"].resolve_options({"replace": "x"})

    def test_unknown_flag(self):
        """Test an unknown flag letter is fatal."""
        with pytest.raises(InvalidRegexpError):
            TRANSFORMS["str-replace"].resolve_options({"find": "a", "flags": "x"})


class TestMd5:
    """Tests for the md5 transform."""

    @pytest.mark.asyncio
    async def test_hex(self, make_ctx):
        """Test the default hex digest."""
        assert await run("md5", make_ctx("abc")) == "900150983cd24fb0d6963f7d28e17f72"

    @pytest.mark.asyncio
    async def test_base64(self, make_ctx):
        """Test the base64 digest."""
        assert await run("md5", make_ctx("abc"), "base64") == "kAFQmDzST7DWlj99KOF/cg=="

    @pytest.mark.asyncio
    async def test_seed_changes_digest(self, make_ctx):
        """Test a seed salts the digest."""
        plain = await run("md5", make_ctx("abc"))
        seeded = await run("md5", make_ctx("abc"), {"seed": "pepper"})
        assert plain != seeded

    @pytest.mark.asyncio
    async def test_random(self, make_ctx):
        """Test random salting gives a different digest every time."""
        first = await run("md5", make_ctx("abc"), {"random": True})
        second = await run("md5", make_ctx("abc"), {"random": True})
        assert first != second


class TestCustomTransform:
    """Tests for the custom transform."""

    @pytest.mark.asyncio
    async def test_sync_function(self, make_ctx):
        """Test a plain function receives the value and data type."""
        seen = {}

        def shout(value, data_type):
            seen["data_type"] = data_type
            return value.upper()

        assert await run("custom", make_ctx("hi"), shout) == "HI"
        assert seen["data_type"] is DataType.STRING

    @pytest.mark.asyncio
    async def test_async_function(self, make_ctx):
        """Test a coroutine function is awaited."""

        async def double(value, data_type):
            return value * 2

        assert await run("custom", make_ctx(21, DataType.INT), {"fn": double}) == 42

    def test_missing_function(self):
        """Test a non-callable is fatal."""
        with pytest.raises(MissingFunctionError):
            TRANSFORMS["custom"].resolve_options({"fn": "not callable"})


class TestFormattingTransforms:
    """Tests for the telephone and url transforms."""

    @pytest.mark.asyncio
    async def test_telephone(self, make_ctx):
        """Test telephone formatting with options."""
        ctx = make_ctx("+44.7912345678", DataType.TELEPHONE)
        assert await run("telephone", ctx, {"international": True}) == "+447912345678"
        assert await run("telephone", ctx, "uk-mobile") == "07912 345 678"

    @pytest.mark.asyncio
    async def test_telephone_uses_form_country_code(self, make_ctx):
        """Test local numbers take the form's default country code."""
        ctx = make_ctx("07912345678", DataType.TELEPHONE, settings=FormSettings(default_country_code="353"))
        assert await run("telephone", ctx, {"international": True}) == "+3537912345678"

    def test_unknown_telephone_format(self):
        """Test an unknown named format is fatal."""
        with pytest.raises(InvalidOptionsError):
            TRANSFORMS["telephone"].resolve_options("us-local")

    @pytest.mark.asyncio
    async def test_url(self, make_ctx):
        """Test a protocol is added when missing."""
        assert await run("url", make_ctx("example.com", DataType.URL)) == "http://example.com"
        assert await run("url", make_ctx("example.com", DataType.URL), "https") == "https://example.com"
        assert await run("url", make_ctx("ftp://x.org", DataType.URL)) == "ftp://x.org"
