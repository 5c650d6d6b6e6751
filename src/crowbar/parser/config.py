from crowbar.exceptions import ConfigError

# Mapping of file extensions to language names used in this module
SUPPORTED_LANGUAGES = {
    ".rs": "rust",
}

KEYWORDS = frozenset({
    "as", "async", "await", "break", "const", "continue", "crate", "dyn",
    "else", "enum", "extern", "false", "fn", "for", "if", "impl", "in",
    "let", "loop", "match", "mod", "move", "mut", "pub", "ref", "return",
    "self", "Self", "static", "struct", "super", "trait", "true", "type",
    "unsafe", "use", "where", "while",
    # Reserved for future use
    "abstract", "become", "box", "do", "final", "macro", "override",
    "priv", "try", "typeof", "unsized", "virtual", "yield",
})

# Longest first so the lexer can take the first match.
MULTI_CHAR_PUNCT = (
    "<<=", ">>=", "...", "..=",
    "::", "->", "=>", "==", "!=", "<=", ">=", "&&", "||",
    "+=", "-=", "*=", "/=", "%=", "^=", "&=", "|=", "<<", ">>", "..",
)

SINGLE_CHAR_PUNCT = frozenset(";,.:+-*/%^!&|=<>@#$?~")

OPEN_DELIMITERS = {"(": ")", "[": "]", "{": "}"}
CLOSE_DELIMITERS = {")": "(", "]": "[", "}": "{"}

# Binding keywords that introduce a declaration.
LET_KEYWORD = "let"
ITEM_BINDINGS = ("const", "static")


def validate_extension(extension: str) -> str:
    """
    Validate a file extension and return its language.

    Args:
        extension: File extension (e.g., '.rs')

    Returns:
        The language name for the extension.

    Raises:
        ConfigError: If the extension is not supported.
    """
    if extension not in SUPPORTED_LANGUAGES:
        supported = ", ".join(SUPPORTED_LANGUAGES.keys())
        raise ConfigError(
            f"File extension '{extension}' is not supported. Supported extensions: {supported}"
        )

    return SUPPORTED_LANGUAGES[extension]
