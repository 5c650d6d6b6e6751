# Custom exceptions for Crowbar

from typing import Any, Dict, Optional


class CrowbarError(Exception):
    """Base exception for all application-specific errors."""

    code = "CROWBAR_ERROR"

    def to_dict(self) -> Dict[str, Any]:
        """Structured form used by the CLI's JSON output."""
        return {"code": self.code, "message": str(self)}


class ParseError(CrowbarError):
    """
    Raised when Rust source cannot be parsed.

    Carries the offset of the offending character plus its 1-based line and
    column, and one of the CATEGORIES below.
    """

    code = "PARSE_ERROR"

    UNTERMINATED_LITERAL = "unterminated_literal"
    UNTERMINATED_COMMENT = "unterminated_comment"
    UNEXPECTED_TOKEN = "unexpected_token"
    UNBALANCED_DELIMITER = "unbalanced_delimiter"

    CATEGORIES = (
        UNTERMINATED_LITERAL,
        UNTERMINATED_COMMENT,
        UNEXPECTED_TOKEN,
        UNBALANCED_DELIMITER,
    )

    def __init__(self, category: str, message: str, offset: int, line: int, column: int):
        self.category = category
        self.message = message
        self.offset = offset
        self.line = line
        self.column = column
        super().__init__(f"{message} at line {line}, column {column}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "category": self.category,
            "message": self.message,
            "offset": self.offset,
            "line": self.line,
            "column": self.column,
        }


class LiteralError(CrowbarError):
    """Raised when literal text cannot be decoded into a value."""

    code = "LITERAL_ERROR"

    def __init__(self, literal: str, message: str):
        self.literal = literal
        self.message = message
        super().__init__(f"Invalid literal {literal!r}: {message}")


class MutateError(CrowbarError):
    """Raised when an edit cannot be applied."""

    code = "MUTATE_ERROR"


class EntryNotFound(MutateError):
    """Raised when an entry id no longer matches any catalog entry."""

    code = "ENTRY_NOT_FOUND"

    def __init__(self, entry_id: Any):
        self.entry_id = entry_id
        super().__init__(f"No editable variable '{entry_id}' in the current source")


class KindMismatch(MutateError):
    """Raised when the new value's kind differs from the entry's kind."""

    code = "KIND_MISMATCH"

    def __init__(self, entry_id: Any, expected: str, actual: str):
        self.entry_id = entry_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Variable '{entry_id}' holds a {expected} value, got {actual}"
        )


class ConfigError(CrowbarError):
    """Raised for configuration-related problems."""

    code = "CONFIG_ERROR"


class RunnerError(CrowbarError):
    """Raised when the compile-and-run collaborator cannot be used."""

    code = "RUNNER_ERROR"

    def __init__(self, message: str, command: Optional[str] = None):
        self.command = command
        super().__init__(message)
