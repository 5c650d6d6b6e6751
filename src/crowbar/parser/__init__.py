"""
This facade exposes the public API for the parser module.
"""
from .facade import parse, parse_file, read_source
from .serializer import serialize
from .tree import Declaration, NodeKind, SyntaxNode, SyntaxTree, Token, TokenKind

__all__ = [
    "parse",
    "parse_file",
    "read_source",
    "serialize",
    "Declaration",
    "NodeKind",
    "SyntaxNode",
    "SyntaxTree",
    "Token",
    "TokenKind",
]
