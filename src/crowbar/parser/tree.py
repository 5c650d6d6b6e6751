"""
Syntax tree types.

Nodes hold offsets into the one source string that produced them rather than
substrings or parent pointers. Leaves wrap exactly one token, and the leaves of
a tree tile the whole source, trivia included.
"""

import bisect
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Tuple

from crowbar.schemas import Span


class TokenKind(str, Enum):
    WHITESPACE = "whitespace"
    LINE_COMMENT = "line_comment"
    BLOCK_COMMENT = "block_comment"
    IDENT = "ident"
    KEYWORD = "keyword"
    LIFETIME = "lifetime"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    RAW_STRING = "raw_string"
    BYTE_STRING = "byte_string"
    BYTE = "byte"
    CHAR = "char"
    PUNCT = "punct"
    OPEN_DELIM = "open_delim"
    CLOSE_DELIM = "close_delim"

    @property
    def is_trivia(self) -> bool:
        return self in _TRIVIA


_TRIVIA = frozenset({TokenKind.WHITESPACE, TokenKind.LINE_COMMENT, TokenKind.BLOCK_COMMENT})


class NodeKind(str, Enum):
    SOURCE_FILE = "source_file"
    BLOCK = "block"
    GROUP = "group"
    DECLARATION = "declaration"
    TYPE = "type"
    INITIALIZER = "initializer"
    TOKEN = "token"
    TRIVIA = "trivia"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    start: int
    end: int


@dataclass(frozen=True, eq=False)
class SyntaxNode:
    """A node of the tree; leaves carry the TokenKind of the token they wrap."""

    kind: NodeKind
    start: int
    end: int
    children: Tuple["SyntaxNode", ...] = ()
    token: Optional[TokenKind] = None

    @property
    def span(self) -> Span:
        return Span(start=self.start, end=self.end)

    @property
    def is_leaf(self) -> bool:
        return self.token is not None

    @property
    def is_trivia(self) -> bool:
        return self.kind is NodeKind.TRIVIA

    def significant_children(self) -> List["SyntaxNode"]:
        """Children with trivia filtered out."""
        return [child for child in self.children if not child.is_trivia]

    def walk(self) -> Iterator["SyntaxNode"]:
        """Pre-order traversal, so nodes come out in document order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def leaves(self) -> Iterator["SyntaxNode"]:
        for node in self.walk():
            if node.is_leaf:
                yield node


@dataclass(frozen=True, eq=False)
class Declaration(SyntaxNode):
    """
    A `let` statement or a `const`/`static` item.

    `name` is only set when the pattern binds a single identifier; tuple and
    struct patterns leave it as None.
    """

    binding: str = "let"
    name: Optional[str] = None
    mutable: bool = False
    type_node: Optional[SyntaxNode] = None
    initializer: Optional[SyntaxNode] = None
    terminated: bool = False


def leaf(token: Token) -> SyntaxNode:
    kind = NodeKind.TRIVIA if token.kind.is_trivia else NodeKind.TOKEN
    return SyntaxNode(kind=kind, start=token.start, end=token.end, token=token.kind)


def line_starts(text: str) -> List[int]:
    starts = [0]
    index = text.find("\n")
    while index != -1:
        starts.append(index + 1)
        index = text.find("\n", index + 1)
    return starts


def line_col(starts: List[int], offset: int) -> Tuple[int, int]:
    """1-based (line, column) for an offset, given precomputed line starts."""
    line_index = bisect.bisect_right(starts, offset) - 1
    return line_index + 1, offset - starts[line_index] + 1


@dataclass(frozen=True, eq=False)
class SyntaxTree:
    """A parsed source string and the root node that covers all of it."""

    text: str
    root: SyntaxNode
    _line_starts: List[int] = field(default_factory=list, repr=False, compare=False)

    def __post_init__(self):
        if not self._line_starts:
            self._line_starts.extend(line_starts(self.text))

    def node_text(self, node: SyntaxNode) -> str:
        return self.text[node.start:node.end]

    def position(self, offset: int) -> Tuple[int, int]:
        return line_col(self._line_starts, offset)

    def walk(self) -> Iterator[SyntaxNode]:
        return self.root.walk()

    def leaves(self) -> Iterator[SyntaxNode]:
        return self.root.leaves()

    def declarations(self) -> Iterator[Declaration]:
        for node in self.walk():
            if isinstance(node, Declaration):
                yield node
