from typing import List, Optional

from crowbar.exceptions import ParseError
from crowbar.logging_config import logger
from .config import CLOSE_DELIMITERS, ITEM_BINDINGS, LET_KEYWORD
from .lexer import tokenize
from .tree import (
    Declaration,
    NodeKind,
    SyntaxNode,
    SyntaxTree,
    Token,
    TokenKind,
    leaf,
    line_col,
    line_starts,
)


class RustParser:
    """
    Builds a token tree for Rust source.

    Balanced delimiters become BLOCK/GROUP nodes and `let`/`const`/`static`
    bindings become Declaration nodes; every other token stays a leaf where it
    appears. That is all the structure the variable scanner needs, and it keeps
    the tree lossless.
    """

    def __init__(self, text: str, tokens: List[Token]):
        self.text = text
        self.tokens = tokens
        self.pos = 0

    def parse(self) -> SyntaxTree:
        children = self._parse_sequence(opener=None)
        root = SyntaxNode(
            kind=NodeKind.SOURCE_FILE,
            start=0,
            end=len(self.text),
            children=tuple(children),
        )
        return SyntaxTree(text=self.text, root=root)

    # Helpers

    def _text(self, token: Token) -> str:
        return self.text[token.start:token.end]

    def _is(self, token: Token, kind: TokenKind, text: str) -> bool:
        return token.kind is kind and self._text(token) == text

    def _node_is(self, node: Optional[SyntaxNode], kind: TokenKind, text: str) -> bool:
        return (
            node is not None
            and node.token is kind
            and self.text[node.start:node.end] == text
        )

    def _error(self, category: str, message: str, offset: int) -> ParseError:
        line, column = line_col(line_starts(self.text), offset)
        return ParseError(category, message, offset, line, column)

    def _next_significant(self, index: int) -> int:
        """Index of the first non-trivia token at or after index (len if none)."""
        while index < len(self.tokens) and self.tokens[index].kind.is_trivia:
            index += 1
        return index

    def _split_token(self, head: int) -> None:
        """Replace the current token by its first `head` characters and the rest."""
        token = self.tokens[self.pos]
        cut = token.start + head
        self.tokens[self.pos:self.pos + 1] = [
            Token(kind=token.kind, start=token.start, end=cut),
            Token(kind=token.kind, start=cut, end=token.end),
        ]

    # Sequences and groups

    def _parse_sequence(self, opener: Optional[Token]) -> List[SyntaxNode]:
        """
        Parse elements until the closer matching `opener` (left unconsumed) or,
        at the top level, until end of input.
        """
        items: List[SyntaxNode] = []

        while self.pos < len(self.tokens):
            token = self.tokens[self.pos]

            if token.kind is TokenKind.CLOSE_DELIM:
                closer = self._text(token)
                if opener is None:
                    raise self._error(
                        ParseError.UNBALANCED_DELIMITER,
                        f"unexpected closing delimiter '{closer}'",
                        token.start,
                    )
                if CLOSE_DELIMITERS[closer] != self._text(opener):
                    raise self._error(
                        ParseError.UNBALANCED_DELIMITER,
                        f"mismatched closing delimiter '{closer}' for '{self._text(opener)}'",
                        token.start,
                    )
                return items

            if token.kind is TokenKind.KEYWORD and self._starts_declaration(token, items):
                items.append(self._parse_declaration())
                continue

            items.append(self._parse_element())

        if opener is not None:
            raise self._error(
                ParseError.UNBALANCED_DELIMITER,
                f"unclosed delimiter '{self._text(opener)}'",
                opener.start,
            )
        return items

    def _parse_element(self) -> SyntaxNode:
        token = self.tokens[self.pos]
        if token.kind is TokenKind.OPEN_DELIM:
            return self._parse_group()
        self.pos += 1
        return leaf(token)

    def _parse_group(self) -> SyntaxNode:
        opener = self.tokens[self.pos]
        self.pos += 1
        inner = self._parse_sequence(opener)
        closer = self.tokens[self.pos]
        self.pos += 1

        kind = NodeKind.BLOCK if self._text(opener) == "{" else NodeKind.GROUP
        return SyntaxNode(
            kind=kind,
            start=opener.start,
            end=closer.end,
            children=(leaf(opener), *inner, leaf(closer)),
        )

    # Declarations

    def _starts_declaration(self, token: Token, items: List[SyntaxNode]) -> bool:
        word = self._text(token)
        if word == LET_KEYWORD:
            return self._at_statement_start(items)
        if word in ITEM_BINDINGS:
            at_item = self._at_statement_start(items) or self._after_visibility(items)
            return at_item and self._binding_name_follows()
        return False

    def _significant_tail(self, items: List[SyntaxNode], count: int) -> List[Optional[SyntaxNode]]:
        """The last `count` non-trivia items, most recent first, None-padded."""
        found: List[Optional[SyntaxNode]] = []
        for node in reversed(items):
            if node.is_trivia:
                continue
            found.append(node)
            if len(found) == count:
                break
        return found + [None] * (count - len(found))

    def _at_statement_start(self, items: List[SyntaxNode]) -> bool:
        prev, before = self._significant_tail(items, 2)
        if prev is None:
            return True
        if prev.kind in (NodeKind.DECLARATION, NodeKind.BLOCK):
            return True
        if self._node_is(prev, TokenKind.PUNCT, ";"):
            return True
        # Attribute: #[...] or #![...]
        if prev.kind is NodeKind.GROUP and self.text[prev.start] == "[":
            return self._node_is(before, TokenKind.PUNCT, "#") or self._node_is(before, TokenKind.PUNCT, "!")
        return False

    def _after_visibility(self, items: List[SyntaxNode]) -> bool:
        prev, before = self._significant_tail(items, 2)
        if self._node_is(prev, TokenKind.KEYWORD, "pub"):
            return True
        return (
            prev is not None
            and prev.kind is NodeKind.GROUP
            and self._node_is(before, TokenKind.KEYWORD, "pub")
        )

    def _binding_name_follows(self) -> bool:
        """`const`/`static` must be followed by `[mut] NAME :` to be a binding."""
        count = len(self.tokens)
        index = self._next_significant(self.pos + 1)
        if index < count and self._is(self.tokens[index], TokenKind.KEYWORD, "mut"):
            index = self._next_significant(index + 1)
        if index >= count or self.tokens[index].kind is not TokenKind.IDENT:
            return False
        index = self._next_significant(index + 1)
        return index < count and self._is(self.tokens[index], TokenKind.PUNCT, ":")

    def _parse_declaration(self) -> Declaration:
        keyword = self.tokens[self.pos]
        binding = self._text(keyword)
        self.pos += 1

        children: List[SyntaxNode] = [leaf(keyword)]
        pattern: List[SyntaxNode] = []
        bucket: List[SyntaxNode] = pattern
        phase = "pattern"
        type_node = None
        initializer = None
        terminated = False
        angle_depth = 0

        while self.pos < len(self.tokens):
            token = self.tokens[self.pos]
            if token.kind is TokenKind.CLOSE_DELIM:
                break

            text = self._text(token)
            is_punct = token.kind is TokenKind.PUNCT

            if is_punct and text == ";":
                terminated = True
                break

            if phase == "pattern" and is_punct and text == ":":
                children.extend(pattern)
                children.append(leaf(token))
                self.pos += 1
                phase, bucket = "type", []
                continue

            # `Vec<u8>= 5` lexes `>=` as one token; split it into the closer and `=`
            if is_punct and phase == "type" and text in (">=", ">>=") and angle_depth > 0:
                self._split_token(len(text) - 1)
                continue

            # Later `=` belong to the initializer (`a = b = 5`, `if let P = o`)
            if is_punct and text == "=" and phase != "init" and (phase == "pattern" or angle_depth <= 0):
                if phase == "pattern":
                    children.extend(pattern)
                else:
                    type_node = self._wrap(NodeKind.TYPE, bucket, children)
                children.append(leaf(token))
                self.pos += 1
                phase, bucket = "init", []
                continue

            # Generic arguments may hold `=` (Iterator<Item = u8>)
            if phase == "type" and text in ("<", "<<"):
                angle_depth += len(text)
            elif phase == "type" and text in (">", ">>"):
                angle_depth -= len(text)

            bucket.append(self._parse_element())

        if phase == "pattern":
            children.extend(pattern)
        elif phase == "type":
            type_node = self._wrap(NodeKind.TYPE, bucket, children)
        else:
            initializer = self._wrap(NodeKind.INITIALIZER, bucket, children)

        if terminated:
            children.append(leaf(self.tokens[self.pos]))
            self.pos += 1

        name, mutable = self._binding_name(binding, pattern)
        if not terminated:
            logger.debug(f"Unterminated '{binding}' declaration at offset {keyword.start}")

        return Declaration(
            kind=NodeKind.DECLARATION,
            start=keyword.start,
            end=children[-1].end,
            children=tuple(children),
            binding=binding,
            name=name,
            mutable=mutable,
            type_node=type_node,
            initializer=initializer,
            terminated=terminated,
        )

    def _wrap(self, kind: NodeKind, items: List[SyntaxNode], children: List[SyntaxNode]) -> Optional[SyntaxNode]:
        """
        Append `items` to `children`, grouping everything between the first and
        last significant item into one `kind` node. Surrounding trivia stays
        outside so the node's span is exactly the written type/expression.
        """
        significant = [i for i, node in enumerate(items) if not node.is_trivia]
        if not significant:
            children.extend(items)
            return None

        first, last = significant[0], significant[-1]
        node = SyntaxNode(
            kind=kind,
            start=items[first].start,
            end=items[last].end,
            children=tuple(items[first:last + 1]),
        )
        children.extend(items[:first])
        children.append(node)
        children.extend(items[last + 1:])
        return node

    def _binding_name(self, binding: str, pattern: List[SyntaxNode]):
        words = [node for node in pattern if not node.is_trivia]
        mutable = False

        allowed_modifiers = ("ref", "mut") if binding == LET_KEYWORD else ("mut",)
        while len(words) > 1 and words[0].token is TokenKind.KEYWORD:
            modifier = self.text[words[0].start:words[0].end]
            if modifier not in allowed_modifiers:
                return None, False
            mutable = mutable or modifier == "mut"
            words = words[1:]

        if len(words) != 1 or words[0].token is not TokenKind.IDENT:
            return None, mutable

        name = self.text[words[0].start:words[0].end]
        if name == "_":
            return None, mutable
        return name, mutable


def parse_rust(text: str) -> SyntaxTree:
    """Parse Rust source into a lossless SyntaxTree; raises ParseError."""
    tokens = tokenize(text)
    return RustParser(text, tokens).parse()
