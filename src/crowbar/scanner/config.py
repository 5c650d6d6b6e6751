from crowbar.parser.tree import TokenKind

# Tokens that are literals on their own
LITERAL_TOKENS = frozenset({
    TokenKind.INTEGER,
    TokenKind.FLOAT,
    TokenKind.STRING,
    TokenKind.RAW_STRING,
})
NUMERIC_TOKENS = frozenset({TokenKind.INTEGER, TokenKind.FLOAT})
STRING_TOKENS = frozenset({TokenKind.STRING, TokenKind.RAW_STRING})
BOOLEAN_KEYWORDS = ("true", "false")

# `"text".to_string()` / `"text".to_owned()`
STRING_METHODS = ("to_string", "to_owned")
# `String::from("text")`
STRING_CONSTRUCTOR = ("String", "::", "from")

# Bindings that can be the target of a constant reference
CONSTANT_BINDINGS = ("const", "static")
