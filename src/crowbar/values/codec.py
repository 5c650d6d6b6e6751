"""
Literal codec: Rust literal text <-> tagged values.

decode() records how a literal was written in the value's style; encode()
writes a value back in that style. An unchanged value is returned as its
original text, so a no-op edit is byte-identical. A changed value that the
old style cannot express falls back to the plain default form.
"""

import math
from decimal import Decimal
from typing import Any, Optional, Union

from pydantic import ValidationError

from crowbar.exceptions import LiteralError
from crowbar.schemas import (
    BooleanStyle,
    BooleanValue,
    FloatStyle,
    FloatValue,
    IntegerStyle,
    IntegerValue,
    StringStyle,
    StringValue,
    ValueKind,
)
from .config import (
    BASE_FORMATS,
    BASE_PREFIXES,
    BOOLEAN_INPUTS,
    BOOLEAN_LITERALS,
    ENCODE_ESCAPES,
    FLOAT_PATTERN,
    FLOAT_SUFFIXES,
    LITERAL_PATTERNS,
    RAW_STRING_PATTERN,
    SIGN_PATTERN,
    SIMPLE_ESCAPES,
)

AnyValue = Union[IntegerValue, FloatValue, BooleanValue, StringValue]
AnyStyle = Union[IntegerStyle, FloatStyle, BooleanStyle, StringStyle]


def kind_of(value: AnyValue) -> ValueKind:
    return ValueKind(value.kind)


# Decoding

def decode(text: str) -> AnyValue:
    """
    Decode the text of a literal (optionally preceded by a unary minus).

    Args:
        text: Literal text exactly as it appears in the source

    Returns:
        A value whose style records the original text and notation

    Raises:
        LiteralError: If the text is not a supported literal
    """
    if text in BOOLEAN_LITERALS:
        return BooleanValue(value=BOOLEAN_LITERALS[text], style=BooleanStyle(source=text))

    if text.startswith(('"', 'r"', "r#")):
        return _decode_string(text)

    sign = SIGN_PATTERN.match(text)
    negative = sign is not None
    body = text[sign.end():] if sign else text

    if not body[:1].isdigit():
        raise LiteralError(text, "not an integer, float, boolean or string literal")

    return _decode_number(text, body, negative)


def style_of(text: str) -> AnyStyle:
    return decode(text).style


def _decode_number(text: str, body: str, negative: bool) -> AnyValue:
    for base in (16, 8, 2):
        if body.startswith(BASE_PREFIXES[base]):
            match = LITERAL_PATTERNS[base].fullmatch(body)
            if not match:
                raise LiteralError(text, f"malformed base-{base} integer")
            return _integer(text, match, base, negative)

    match = LITERAL_PATTERNS[10].fullmatch(body)
    if match:
        if match.group("suffix") in FLOAT_SUFFIXES:
            # `1f32` is a float written without a point
            magnitude = float(match.group("digits").replace("_", ""))
            style = FloatStyle(source=text, suffix=match.group("suffix"), point=False)
            return _float(text, -magnitude if negative else magnitude, style)
        return _integer(text, match, 10, negative)

    match = FLOAT_PATTERN.fullmatch(body)
    if not match or not (match.group("point") or match.group("exp")):
        raise LiteralError(text, "malformed number")
    if match.group("point") and not match.group("frac") and (match.group("exp") or match.group("suffix")):
        raise LiteralError(text, "a float ending in '.' cannot carry an exponent or suffix")

    number = match.group("int")
    if match.group("frac"):
        number += "." + match.group("frac")
    if match.group("exp"):
        number += match.group("exp")
    magnitude = float(number.replace("_", ""))

    style = FloatStyle(
        source=text,
        exponent=match.group("exp") is not None,
        suffix=match.group("suffix") or "",
    )
    return _float(text, -magnitude if negative else magnitude, style)


def _float(text: str, value: float, style: FloatStyle) -> FloatValue:
    try:
        return FloatValue(value=value, style=style)
    except ValidationError:
        raise LiteralError(text, "float literal out of range")


def _integer(text: str, match, base: int, negative: bool) -> IntegerValue:
    digits = match.group("digits")
    clean = digits.replace("_", "")
    if not clean:
        raise LiteralError(text, "integer literal has no digits")

    magnitude = int(clean, base)
    style = IntegerStyle(
        source=text,
        base=base,
        suffix=match.group("suffix") or "",
        uppercase=base == 16 and any(c in "ABCDEF" for c in clean),
        group=_group_size(digits),
        width=len(clean) if len(clean) > 1 and clean[0] == "0" else 0,
    )
    return IntegerValue(value=-magnitude if negative else magnitude, style=style)


def _group_size(digits: str) -> int:
    """Size of regular `_` digit groups (1_000_000 -> 3), or 0."""
    if "_" not in digits:
        return 0
    groups = [group for group in digits.split("_") if group]
    if len(groups) < 2:
        return 0
    size = len(groups[1])
    if len(groups[0]) > size or any(len(group) != size for group in groups[1:]):
        return 0
    return size


def _decode_string(text: str) -> StringValue:
    if text.startswith("r"):
        match = RAW_STRING_PATTERN.fullmatch(text)
        if not match:
            raise LiteralError(text, "malformed raw string")
        body = match.group("body").replace("\r\n", "\n")
        style = StringStyle(source=text, raw=True, hashes=len(match.group("hashes")))
        return StringValue(value=body, style=style)

    if len(text) < 2 or not text.endswith('"'):
        raise LiteralError(text, "unterminated string")

    return StringValue(value=_unescape(text, text[1:-1]), style=StringStyle(source=text))


def _unescape(text: str, body: str) -> str:
    out = []
    index = 0
    length = len(body)

    while index < length:
        ch = body[index]
        if ch != "\\":
            if ch == "\r" and body[index + 1:index + 2] == "\n":
                index += 1
                continue
            out.append(ch)
            index += 1
            continue

        if index + 1 >= length:
            raise LiteralError(text, "dangling backslash")
        esc = body[index + 1]
        index += 2

        if esc in SIMPLE_ESCAPES:
            out.append(SIMPLE_ESCAPES[esc])
        elif esc == "x":
            code = body[index:index + 2]
            if len(code) != 2 or any(c not in "0123456789abcdefABCDEF" for c in code):
                raise LiteralError(text, "\\x escape needs two hex digits")
            if int(code, 16) > 0x7F:
                raise LiteralError(text, "\\x escape must be at most 0x7F")
            out.append(chr(int(code, 16)))
            index += 2
        elif esc == "u":
            close = body.find("}", index)
            if body[index:index + 1] != "{" or close == -1:
                raise LiteralError(text, "\\u escape must look like \\u{...}")
            code = body[index + 1:close].replace("_", "")
            if not 1 <= len(code) <= 6 or any(c not in "0123456789abcdefABCDEF" for c in code):
                raise LiteralError(text, "\\u escape needs 1 to 6 hex digits")
            point = int(code, 16)
            if point > 0x10FFFF or 0xD800 <= point <= 0xDFFF:
                raise LiteralError(text, f"\\u{{{code}}} is not a unicode scalar value")
            out.append(chr(point))
            index = close + 1
        elif esc in "\n\r":
            # Line continuation: skip the newline and leading whitespace
            while index < length and body[index] in " \t\n\r":
                index += 1
        else:
            raise LiteralError(text, f"unknown escape \\{esc}")

    return "".join(out)


# Encoding

def _unchanged(value: AnyValue, style: AnyStyle) -> bool:
    if style.source is None:
        return False
    try:
        original = decode(style.source)
    except LiteralError:
        return False
    return same_value(original, value)


def same_value(left: AnyValue, right: AnyValue) -> bool:
    """True when both values have the same kind and payload (style ignored)."""
    if left.kind != right.kind:
        return False
    if isinstance(left, FloatValue):
        # -0.0 == 0.0, so compare the sign too
        return (
            left.value == right.value
            and math.copysign(1.0, left.value) == math.copysign(1.0, right.value)
        )
    return left.value == right.value


def encode(value: AnyValue, style: Optional[AnyStyle] = None) -> str:
    """
    Encode a value as Rust literal text in the given style.

    Args:
        value: Value to write
        style: Style hint, normally the style of the literal being replaced;
            defaults to the value's own style

    Returns:
        Literal text; the original text when the value is unchanged
    """
    if style is None or style.__class__ is not value.style.__class__:
        style = value.style

    if _unchanged(value, style):
        return style.source

    if isinstance(value, BooleanValue):
        return "true" if value.value else "false"
    if isinstance(value, IntegerValue):
        return _encode_integer(value.value, style)
    if isinstance(value, FloatValue):
        return _encode_float(value.value, style)
    return _encode_string(value.value, style)


def _encode_integer(number: int, style: IntegerStyle) -> str:
    digits = format(abs(number), BASE_FORMATS[style.base])
    if style.uppercase:
        digits = digits.upper()
    if style.width:
        digits = digits.zfill(style.width)
    if style.group:
        digits = _group_digits(digits, style.group)
    sign = "-" if number < 0 else ""
    return f"{sign}{BASE_PREFIXES[style.base]}{digits}{style.suffix}"


def _group_digits(digits: str, size: int) -> str:
    groups = []
    end = len(digits)
    while end > 0:
        groups.append(digits[max(0, end - size):end])
        end -= size
    return "_".join(reversed(groups))


def _exponent_form(magnitude: float) -> str:
    mantissa, exponent = format(Decimal(repr(magnitude)).normalize(), "e").split("e")
    return f"{mantissa}e{int(exponent)}"


def _encode_float(number: float, style: FloatStyle) -> str:
    magnitude = abs(number)
    sign = "-" if math.copysign(1.0, number) < 0 else ""

    if not style.point and style.suffix and magnitude.is_integer() and magnitude < 1e16:
        body = str(int(magnitude))
    elif style.exponent:
        body = _exponent_form(magnitude)
    else:
        body = repr(magnitude)
        if "e" in body:
            # Too large or small for plain decimal form
            body = _exponent_form(magnitude)

    return f"{sign}{body}{style.suffix}"


def _fits_raw(text: str, hashes: int) -> bool:
    return "\r" not in text and ('"' + "#" * hashes) not in text


def _escape_char(ch: str) -> str:
    if ch in ENCODE_ESCAPES:
        return ENCODE_ESCAPES[ch]
    if ord(ch) < 0x20 or ord(ch) == 0x7F:
        return f"\\u{{{ord(ch):x}}}"
    return ch


def _encode_string(text: str, style: StringStyle) -> str:
    if style.raw and _fits_raw(text, style.hashes):
        fence = "#" * style.hashes
        return f'r{fence}"{text}"{fence}'
    return '"' + "".join(_escape_char(ch) for ch in text) + '"'


# Construction from user input

def make_value(kind: ValueKind, raw: Any) -> AnyValue:
    """
    Build a value of `kind` from a Python object.

    Raises:
        LiteralError: If raw cannot represent a value of that kind
    """
    kind = ValueKind(kind)
    try:
        if kind is ValueKind.BOOLEAN:
            if not isinstance(raw, bool):
                raise LiteralError(repr(raw), "expected a boolean")
            return BooleanValue(value=raw)
        if kind is ValueKind.INTEGER:
            if isinstance(raw, bool) or not isinstance(raw, int):
                raise LiteralError(repr(raw), "expected an integer")
            return IntegerValue(value=raw)
        if kind is ValueKind.FLOAT:
            if isinstance(raw, bool) or not isinstance(raw, (int, float)):
                raise LiteralError(repr(raw), "expected a number")
            return FloatValue(value=float(raw))
        if not isinstance(raw, str):
            raise LiteralError(repr(raw), "expected a string")
        return StringValue(value=raw)
    except ValidationError as e:
        raise LiteralError(repr(raw), str(e.errors()[0]["msg"]))
    except OverflowError:
        raise LiteralError(repr(raw), "too large for a float")


def parse_input(kind: ValueKind, text: str) -> AnyValue:
    """
    Convert text typed by a user into a value of `kind`.

    Integers accept Rust literals (`0xff`, `1_000`) and Python int syntax,
    floats any finite float, booleans true/false/yes/no/on/off/1/0, and strings
    are taken verbatim.
    """
    kind = ValueKind(kind)
    if kind is ValueKind.STRING:
        return make_value(kind, text)

    cleaned = text.strip()
    if kind is ValueKind.BOOLEAN:
        if cleaned.lower() not in BOOLEAN_INPUTS:
            raise LiteralError(text, "expected true or false")
        return make_value(kind, BOOLEAN_INPUTS[cleaned.lower()])

    try:
        decoded = decode(cleaned)
    except LiteralError:
        decoded = None

    if kind is ValueKind.INTEGER:
        if isinstance(decoded, IntegerValue):
            return make_value(kind, decoded.value)
        try:
            return make_value(kind, int(cleaned, 0))
        except ValueError:
            raise LiteralError(text, "expected an integer")

    if isinstance(decoded, (IntegerValue, FloatValue)):
        return make_value(kind, float(decoded.value))
    try:
        return make_value(kind, float(cleaned.replace("_", "")))
    except ValueError:
        raise LiteralError(text, "expected a number")
