"""
Tests for the literal codec: decode, encode, style preservation and user input.
"""

import math

import pytest

from crowbar.exceptions import LiteralError
from crowbar.schemas import (
    BooleanValue,
    FloatValue,
    IntegerValue,
    StringValue,
    ValueKind,
)
from crowbar.values import decode, encode, kind_of, make_value, parse_input, same_value, style_of


class TestDecode:

    def test_decimal_integer(self):
        value = decode("42")
        assert isinstance(value, IntegerValue)
        assert value.value == 42
        assert value.style.base == 10
        assert value.style.source == "42"

    def test_hex_keeps_case(self):
        value = decode("0x1F")
        assert value.value == 31
        assert value.style.base == 16
        assert value.style.uppercase

    def test_grouping_and_suffix(self):
        value = decode("1_000_000u64")
        assert value.value == 1_000_000
        assert value.style.group == 3
        assert value.style.suffix == "u64"

    def test_zero_padding(self):
        value = decode("0b0000_1010")
        assert value.value == 10
        assert value.style.width == 8
        assert value.style.group == 4

    @pytest.mark.parametrize("text", ["-5", "- 5", "-\t5"])
    def test_negative_integer(self, text):
        assert decode(text).value == -5

    def test_float(self):
        value = decode("2.5e-3")
        assert isinstance(value, FloatValue)
        assert value.value == pytest.approx(0.0025)
        assert value.style.exponent

    def test_integer_looking_float(self):
        value = decode("1f32")
        assert isinstance(value, FloatValue)
        assert value.value == 1.0
        assert value.style.suffix == "f32"
        assert not value.style.point

    def test_trailing_point_float(self):
        assert decode("3.").value == 3.0

    def test_booleans(self):
        assert decode("true").value is True
        assert decode("false").value is False

    def test_string_escapes(self):
        value = decode(r'"tab\tquote\"nl\nuni\u{1F600}hex\x41"')
        assert value.value == 'tab\tquote"nl\nuni\U0001F600hexA'

    def test_string_line_continuation(self):
        assert decode('"one \\\n      two"').value == "one two"

    def test_raw_string(self):
        value = decode('r#"say "hi""#')
        assert isinstance(value, StringValue)
        assert value.value == 'say "hi"'
        assert value.style.raw
        assert value.style.hashes == 1

    def test_raw_string_normalizes_crlf(self):
        assert decode('r"a\r\nb"').value == "a\nb"

    @pytest.mark.parametrize("text", [
        '"bad \\q escape"',
        '"\\x80"',
        '"\\u{D800}"',
        "0x",
        "0x_",
        "1e999",
        "abc",
        "'c'",
    ])
    def test_invalid_literals(self, text):
        with pytest.raises(LiteralError):
            decode(text)

    def test_kind_of(self):
        assert kind_of(decode("1")) is ValueKind.INTEGER
        assert kind_of(decode("1.0")) is ValueKind.FLOAT
        assert kind_of(decode("true")) is ValueKind.BOOLEAN
        assert kind_of(decode('""')) is ValueKind.STRING


class TestEncode:

    @pytest.mark.parametrize("text", [
        "0", "-12", "0xFF_u8", "1_000", "0o17", "0b1010",
        "0.25", "1e10", "2.5E-3f32", "1f64", "- 3.5",
        "true", '"hello\\nworld"', 'r"C:\\path"', 'r##"a "# b"##',
    ])
    def test_unchanged_value_returns_original_text(self, text):
        assert encode(decode(text), style_of(text)) == text

    def test_integer_keeps_base_and_case(self):
        assert encode(IntegerValue(value=255), style_of("0x1F")) == "0xFF"
        assert encode(IntegerValue(value=255), style_of("0x1f")) == "0xff"

    def test_integer_keeps_grouping_and_suffix(self):
        assert encode(IntegerValue(value=1234567), style_of("1_000")) == "1_234_567"
        assert encode(IntegerValue(value=7), style_of("5u8")) == "7u8"

    def test_integer_padding_grows_as_needed(self):
        assert encode(IntegerValue(value=3), style_of("0b0001")) == "0b0011"
        assert encode(IntegerValue(value=100), style_of("0b0001")) == "0b1100100"

    def test_negative_integer(self):
        assert encode(IntegerValue(value=-3), style_of("5")) == "-3"

    def test_float_keeps_suffix(self):
        assert encode(FloatValue(value=0.5), style_of("1.0f32")) == "0.5f32"

    def test_float_keeps_exponent_style(self):
        assert encode(FloatValue(value=0.0025), style_of("1e-3")) == "2.5e-3"

    def test_float_falls_back_to_exponent(self):
        assert encode(FloatValue(value=1e300), style_of("1.5")) == "1e300"

    def test_float_integral_value_keeps_point(self):
        assert encode(FloatValue(value=3.0), style_of("1.5")) == "3.0"

    def test_float_without_point(self):
        assert encode(FloatValue(value=2.0), style_of("1f32")) == "2f32"

    def test_string_escapes_newline(self):
        encoded = encode(StringValue(value="hello\nworld"), style_of('"hello"'))
        assert encoded == '"hello\\nworld"'

    def test_raw_string_stays_raw_when_it_fits(self):
        assert encode(StringValue(value='a "b" c'), style_of('r#"x"#')) == 'r#"a "b" c"#'

    def test_raw_string_falls_back_to_quotes(self):
        assert encode(StringValue(value='say "hi"'), style_of('r"x"')) == '"say \\"hi\\""'

    def test_control_characters_escaped(self):
        assert encode(StringValue(value="a\x07b"), style_of('"x"')) == '"a\\u{7}b"'

    def test_boolean(self):
        assert encode(BooleanValue(value=True), style_of("false")) == "true"

    def test_style_of_other_kind_is_ignored(self):
        assert encode(IntegerValue(value=5), style_of('"x"')) == "5"

    def test_laws(self):
        for text in ["0x1F", "1_000", "2.5e-3", '"a\\tb"', 'r#"q"#']:
            original = decode(text)
            assert decode(encode(original, original.style)).value == original.value


class TestValues:

    def test_non_finite_floats_rejected(self):
        with pytest.raises(LiteralError):
            make_value(ValueKind.FLOAT, math.inf)
        with pytest.raises(LiteralError):
            make_value(ValueKind.FLOAT, float("nan"))

    def test_make_value_checks_types(self):
        with pytest.raises(LiteralError):
            make_value(ValueKind.INTEGER, True)
        with pytest.raises(LiteralError):
            make_value(ValueKind.BOOLEAN, 1)
        assert make_value(ValueKind.FLOAT, 2).value == 2.0

    def test_same_value(self):
        assert same_value(decode("0x10"), decode("16"))
        assert not same_value(decode("1"), decode("1.0"))
        assert not same_value(decode("0.0"), decode("-0.0"))


class TestParseInput:

    @pytest.mark.parametrize("text,expected", [
        ("42", 42),
        (" -7 ", -7),
        ("0xff", 255),
        ("1_000", 1000),
        ("0o10", 8),
    ])
    def test_integers(self, text, expected):
        assert parse_input(ValueKind.INTEGER, text).value == expected

    @pytest.mark.parametrize("text,expected", [
        ("3", 3.0),
        ("0.5", 0.5),
        ("-1e3", -1000.0),
        ("2.5f32", 2.5),
    ])
    def test_floats(self, text, expected):
        assert parse_input(ValueKind.FLOAT, text).value == expected

    @pytest.mark.parametrize("text,expected", [
        ("true", True), ("False", False), ("yes", True), ("0", False), ("on", True),
    ])
    def test_booleans(self, text, expected):
        assert parse_input(ValueKind.BOOLEAN, text).value is expected

    def test_strings_taken_verbatim(self):
        assert parse_input(ValueKind.STRING, " spaced \\n ").value == " spaced \\n "

    @pytest.mark.parametrize("kind,text", [
        (ValueKind.INTEGER, "abc"),
        (ValueKind.INTEGER, "1.5"),
        (ValueKind.FLOAT, "nan"),
        (ValueKind.FLOAT, "inf"),
        (ValueKind.FLOAT, "1e999"),
        (ValueKind.BOOLEAN, "maybe"),
    ])
    def test_rejected_input(self, kind, text):
        with pytest.raises(LiteralError):
            parse_input(kind, text)
