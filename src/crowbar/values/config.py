"""
Literal grammar tables for the value codec.
"""

import re

INTEGER_SUFFIXES = (
    "i8", "i16", "i32", "i64", "i128", "isize",
    "u8", "u16", "u32", "u64", "u128", "usize",
)
FLOAT_SUFFIXES = ("f32", "f64")

BOOLEAN_LITERALS = {"true": True, "false": False}

_INT_SUFFIX = "|".join(INTEGER_SUFFIXES)
_FLOAT_SUFFIX = "|".join(FLOAT_SUFFIXES)

# Whole-literal patterns; used with fullmatch on the text after any sign.
LITERAL_PATTERNS = {
    16: re.compile(rf"0x(?P<digits>[0-9a-fA-F_]+?)(?P<suffix>{_INT_SUFFIX})?"),
    8: re.compile(rf"0o(?P<digits>[0-7_]+)(?P<suffix>{_INT_SUFFIX})?"),
    2: re.compile(rf"0b(?P<digits>[01_]+)(?P<suffix>{_INT_SUFFIX})?"),
    10: re.compile(rf"(?P<digits>[0-9][0-9_]*)(?P<suffix>{_INT_SUFFIX}|{_FLOAT_SUFFIX})?"),
}

FLOAT_PATTERN = re.compile(
    r"(?P<int>[0-9][0-9_]*)"
    r"(?:(?P<point>\.)(?P<frac>[0-9][0-9_]*)?)?"
    r"(?P<exp>[eE][+-]?_*[0-9][0-9_]*)?"
    rf"(?P<suffix>{_FLOAT_SUFFIX})?"
)

SIGN_PATTERN = re.compile(r"-\s*")

RAW_STRING_PATTERN = re.compile(r'r(?P<hashes>#*)"(?P<body>.*)"(?P=hashes)', re.DOTALL)

BASE_PREFIXES = {16: "0x", 8: "0o", 2: "0b", 10: ""}
BASE_FORMATS = {16: "x", 8: "o", 2: "b", 10: "d"}

SIMPLE_ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "\\": "\\",
    "0": "\0",
    "'": "'",
    '"': '"',
}

# Characters written back as escapes inside normal string literals.
ENCODE_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\0": "\\0",
}

# Truthy/falsy words accepted from user input for boolean entries.
BOOLEAN_INPUTS = {
    "true": True, "1": True, "yes": True, "on": True,
    "false": False, "0": False, "no": False, "off": False,
}
