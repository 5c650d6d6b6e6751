"""
Rust lexer.

Produces every token of the input, whitespace and comments included, so the
token spans tile the source with no gaps.
"""

from typing import List

from crowbar.exceptions import ParseError
from .config import (
    CLOSE_DELIMITERS,
    KEYWORDS,
    MULTI_CHAR_PUNCT,
    OPEN_DELIMITERS,
    SINGLE_CHAR_PUNCT,
)
from .tree import Token, TokenKind, line_col, line_starts


def _is_ident_start(ch: str) -> bool:
    return ch == "_" or ch.isalpha()


def _is_ident_continue(ch: str) -> bool:
    return ch == "_" or ch.isalnum()


class Lexer:
    """Converts Rust source text into a lossless token stream."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self._starts = None

    def tokenize(self) -> List[Token]:
        """Tokenize the full source and return the token stream."""
        tokens: List[Token] = []
        length = len(self.text)

        while self.pos < length:
            start = self.pos
            kind = self._lex_token()
            tokens.append(Token(kind=kind, start=start, end=self.pos))

        return tokens

    def _peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        if index < len(self.text):
            return self.text[index]
        return ""

    def _error(self, category: str, message: str, offset: int) -> ParseError:
        if self._starts is None:
            self._starts = line_starts(self.text)
        line, column = line_col(self._starts, offset)
        return ParseError(category, message, offset, line, column)

    def _lex_token(self) -> TokenKind:
        ch = self._peek()
        nxt = self._peek(1)

        # A byte order mark is kept as leading trivia so the text round-trips
        if ch == "\ufeff" and self.pos == 0:
            self.pos += 1
            return TokenKind.WHITESPACE

        if ch.isspace():
            while self.pos < len(self.text) and self.text[self.pos].isspace():
                self.pos += 1
            return TokenKind.WHITESPACE

        if ch == "/" and nxt == "/":
            end = self.text.find("\n", self.pos)
            self.pos = len(self.text) if end == -1 else end
            return TokenKind.LINE_COMMENT

        if ch == "/" and nxt == "*":
            self._consume_block_comment()
            return TokenKind.BLOCK_COMMENT

        # Prefixed literals: r"..", r#".."#, b"..", b'.', br"..", c"..", cr"..", r#ident
        if ch in "bcr":
            kind = self._lex_prefixed()
            if kind is not None:
                return kind

        if _is_ident_start(ch):
            start = self.pos
            self._consume_ident()
            word = self.text[start:self.pos]
            return TokenKind.KEYWORD if word in KEYWORDS else TokenKind.IDENT

        if ch.isdigit():
            return self._lex_number()

        if ch == '"':
            self._consume_quoted(self.pos, "string literal")
            return TokenKind.STRING

        if ch == "'":
            return self._lex_quote()

        if ch in OPEN_DELIMITERS:
            self.pos += 1
            return TokenKind.OPEN_DELIM

        if ch in CLOSE_DELIMITERS:
            self.pos += 1
            return TokenKind.CLOSE_DELIM

        for punct in MULTI_CHAR_PUNCT:
            if self.text.startswith(punct, self.pos):
                self.pos += len(punct)
                return TokenKind.PUNCT

        if ch in SINGLE_CHAR_PUNCT:
            self.pos += 1
            return TokenKind.PUNCT

        raise self._error(ParseError.UNEXPECTED_TOKEN, f"unexpected character {ch!r}", self.pos)

    def _consume_ident(self) -> None:
        while self.pos < len(self.text) and _is_ident_continue(self.text[self.pos]):
            self.pos += 1

    def _consume_block_comment(self) -> None:
        start = self.pos
        depth = 0
        text = self.text
        while self.pos < len(text):
            if text.startswith("/*", self.pos):
                depth += 1
                self.pos += 2
            elif text.startswith("*/", self.pos):
                depth -= 1
                self.pos += 2
                if depth == 0:
                    return
            else:
                self.pos += 1
        raise self._error(ParseError.UNTERMINATED_COMMENT, "unterminated block comment", start)

    def _consume_quoted(self, quote: int, what: str) -> None:
        """Consume a double-quoted body whose opening quote sits at `quote`."""
        text = self.text
        index = quote + 1
        while index < len(text):
            ch = text[index]
            if ch == "\\":
                index += 2
                continue
            if ch == '"':
                self.pos = index + 1
                return
            index += 1
        raise self._error(ParseError.UNTERMINATED_LITERAL, f"unterminated {what}", quote)

    def _consume_raw(self, hashes_at: int, what: str) -> bool:
        """
        Consume `#*"..."#*` starting at hashes_at. Returns False when no quote
        follows the hashes, leaving the position untouched.
        """
        text = self.text
        index = hashes_at
        while index < len(text) and text[index] == "#":
            index += 1
        if index >= len(text) or text[index] != '"':
            return False
        hashes = index - hashes_at
        terminator = '"' + "#" * hashes
        end = text.find(terminator, index + 1)
        if end == -1:
            raise self._error(ParseError.UNTERMINATED_LITERAL, f"unterminated {what}", index)
        self.pos = end + len(terminator)
        return True

    def _lex_prefixed(self):
        ch = self._peek()
        nxt = self._peek(1)
        start = self.pos

        if ch == "r":
            if nxt == "#" and _is_ident_start(self._peek(2)):
                # Raw identifier r#name
                self.pos += 2
                self._consume_ident()
                return TokenKind.IDENT
            if nxt in ('"', "#") and self._consume_raw(start + 1, "raw string literal"):
                return TokenKind.RAW_STRING
            return None

        if ch == "b":
            if nxt == '"':
                self._consume_quoted(start + 1, "byte string literal")
                return TokenKind.BYTE_STRING
            if nxt == "'":
                self.pos += 1
                self._consume_char(start + 1, "byte literal")
                return TokenKind.BYTE
            if nxt == "r" and self._peek(2) in ('"', "#"):
                if self._consume_raw(start + 2, "raw byte string literal"):
                    return TokenKind.BYTE_STRING
            return None

        # c"..." and cr"..." (C string literals)
        if nxt == '"':
            self._consume_quoted(start + 1, "C string literal")
            return TokenKind.BYTE_STRING
        if nxt == "r" and self._peek(2) in ('"', "#"):
            if self._consume_raw(start + 2, "raw C string literal"):
                return TokenKind.BYTE_STRING
        return None

    def _consume_char(self, quote: int, what: str) -> None:
        """Consume a char/byte literal whose opening quote sits at `quote`."""
        text = self.text
        index = quote + 1
        if index < len(text) and text[index] == "\\":
            index += 2
            while index < len(text) and text[index] not in "'\n":
                index += 1
        elif index < len(text) and text[index] not in "'\n":
            index += 1
        if index < len(text) and text[index] == "'":
            self.pos = index + 1
            return
        raise self._error(ParseError.UNTERMINATED_LITERAL, f"unterminated {what}", quote)

    def _lex_quote(self) -> TokenKind:
        """A `'` starts either a char literal or a lifetime/label."""
        nxt = self._peek(1)
        if nxt == "\\" or (nxt and self._peek(2) == "'"):
            self._consume_char(self.pos, "character literal")
            return TokenKind.CHAR
        if _is_ident_start(nxt):
            self.pos += 1
            self._consume_ident()
            return TokenKind.LIFETIME
        raise self._error(ParseError.UNTERMINATED_LITERAL, "unterminated character literal", self.pos)

    def _consume_while(self, allowed: str) -> None:
        while self.pos < len(self.text) and self.text[self.pos] in allowed:
            self.pos += 1

    def _lex_number(self) -> TokenKind:
        text = self.text
        kind = TokenKind.INTEGER

        if text.startswith(("0x", "0o", "0b"), self.pos):
            self.pos += 2
            self._consume_while("0123456789abcdefABCDEF_")
            self._consume_ident()
            return kind

        self._consume_while("0123456789_")

        # `1.5` and `1.` are floats; `1..2` and `1.max()` are not
        if self._peek() == "." and self._peek(1) != "." and not _is_ident_start(self._peek(1)):
            kind = TokenKind.FLOAT
            self.pos += 1
            if self._peek().isdigit():
                self._consume_while("0123456789_")

        if self._peek() in ("e", "E"):
            index = self.pos + 1
            if index < len(text) and text[index] in "+-":
                index += 1
            digits_start = index
            while index < len(text) and text[index] in "0123456789_":
                index += 1
            if any(c.isdigit() for c in text[digits_start:index]):
                kind = TokenKind.FLOAT
                self.pos = index

        if _is_ident_start(self._peek()):
            self._consume_ident()

        return kind


def tokenize(text: str) -> List[Token]:
    """Tokenize Rust source; raises ParseError on malformed input."""
    return Lexer(text).tokenize()
