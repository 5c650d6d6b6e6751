"""
Value model: decode Rust literals into tagged values and encode them back.
"""

from .codec import decode, encode, kind_of, make_value, parse_input, same_value, style_of

__all__ = [
    "decode",
    "encode",
    "kind_of",
    "make_value",
    "parse_input",
    "same_value",
    "style_of",
]
