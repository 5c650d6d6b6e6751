"""
Initializer classification.

Decides whether a declaration's initializer is something the catalog can
edit, and if so which span holds the literal.
"""

from dataclasses import dataclass
from typing import List, Optional

from crowbar.parser.tree import Declaration, NodeKind, SyntaxNode, SyntaxTree, TokenKind
from crowbar.schemas import Span
from .config import (
    BOOLEAN_KEYWORDS,
    LITERAL_TOKENS,
    NUMERIC_TOKENS,
    STRING_CONSTRUCTOR,
    STRING_METHODS,
    STRING_TOKENS,
)


@dataclass(frozen=True)
class Classification:
    """
    origin is "literal", "constant" or "conversion". For constants `reference`
    names the constant and `span` is the identifier; otherwise `span` covers
    the literal text to decode.
    """

    origin: str
    span: Span
    reference: Optional[str] = None


class InitializerClassifier:
    """Pattern-matches initializer nodes against the editable shapes."""

    def __init__(self, tree: SyntaxTree):
        self.tree = tree

    def _text(self, node: SyntaxNode) -> str:
        return self.tree.node_text(node)

    def _is_token(self, node: SyntaxNode, kind: TokenKind, text: Optional[str] = None) -> bool:
        if node.token is not kind:
            return False
        return text is None or self._text(node) == text

    def classify(self, declaration: Declaration) -> Optional[Classification]:
        """
        Returns None when the initializer is not editable (calls, operators,
        struct literals, missing initializer, ...).
        """
        init = declaration.initializer
        if init is None or not declaration.terminated:
            return None

        significant = init.significant_children()
        literal = self.direct_literal(init)
        if literal is not None:
            return Classification(origin="literal", span=literal)

        if len(significant) == 1 and self._is_token(significant[0], TokenKind.IDENT):
            return Classification(
                origin="constant",
                span=significant[0].span,
                reference=self._text(significant[0]),
            )

        inner = self._string_conversion(significant)
        if inner is not None:
            return Classification(origin="conversion", span=inner.span)

        return None

    def direct_literal(self, init: SyntaxNode) -> Optional[Span]:
        """
        Span of a plain literal initializer, or of `-<number>` with only
        whitespace after the minus.
        """
        significant = init.significant_children()

        if len(significant) == 1:
            node = significant[0]
            if node.token in LITERAL_TOKENS:
                return init.span
            if node.token is TokenKind.KEYWORD and self._text(node) in BOOLEAN_KEYWORDS:
                return init.span
            return None

        if len(significant) == 2:
            minus, number = significant
            trivia = [node for node in init.children if node.is_trivia]
            if (
                self._is_token(minus, TokenKind.PUNCT, "-")
                and number.token in NUMERIC_TOKENS
                and all(node.token is TokenKind.WHITESPACE for node in trivia)
            ):
                return init.span

        return None

    def _string_conversion(self, significant: List[SyntaxNode]) -> Optional[SyntaxNode]:
        # String::from("text")
        if len(significant) == 4:
            path = [self._text(node) for node in significant[:3]]
            call = significant[3]
            if tuple(path) == STRING_CONSTRUCTOR and self._is_paren_group(call):
                args = call.significant_children()[1:-1]
                if len(args) == 1 and args[0].token in STRING_TOKENS:
                    return args[0]

        # "text".to_string() / "text".to_owned()
        if len(significant) == 4:
            literal, dot, method, call = significant
            if (
                literal.token in STRING_TOKENS
                and self._is_token(dot, TokenKind.PUNCT, ".")
                and self._is_token(method, TokenKind.IDENT)
                and self._text(method) in STRING_METHODS
                and self._is_paren_group(call)
                and len(call.significant_children()) == 2
            ):
                return literal

        return None

    def _is_paren_group(self, node: SyntaxNode) -> bool:
        return node.kind is NodeKind.GROUP and self.tree.text[node.start] == "("
