"""
CodeValidator: independent syntax check of edited source with tree-sitter.

The hand-written parser only needs to understand declarations; tree-sitter's
Rust grammar sees the whole program, so it catches an edit that produced text
the compiler would reject at the syntax level.
"""

from typing import List, Tuple

import tree_sitter_rust as tsrust
from tree_sitter import Language, Node, Parser

from crowbar.exceptions import MutateError
from crowbar.logging_config import logger


class CodeValidator:
    """
    Count ERROR and MISSING nodes in tree-sitter's parse of Rust source.
    """

    def __init__(self):
        self.parser = Parser()
        self.parser.language = Language(tsrust.language())
        logger.debug("CodeValidator initialized rust parser")

    def syntax_errors(self, code: str) -> List[Tuple[int, int]]:
        """
        Locate syntax problems in code.

        Args:
            code: Rust source

        Returns:
            1-based (line, column) of each ERROR or MISSING node; columns
            count UTF-8 bytes
        """
        tree = self.parser.parse(bytes(code, "utf8"))
        return [
            (node.start_point[0] + 1, node.start_point[1] + 1)
            for node in self._find_error_nodes(tree.root_node)
        ]

    def validate_syntax(self, code: str) -> Tuple[bool, List[str]]:
        """
        Returns:
            (is_valid, error_messages)
        """
        errors = [
            f"Syntax error at line {line}, column {column}"
            for line, column in self.syntax_errors(code)
        ]
        return not errors, errors

    def check_edit(self, original: str, modified: str) -> List[str]:
        """
        Reject an edit that makes the source less valid.

        Sources that were already broken stay editable: only an increase in
        the number of error nodes counts against the edit.

        Returns:
            Warnings about errors that were present before the edit

        Raises:
            MutateError: If the edit introduced new syntax errors
        """
        before = self.syntax_errors(original)
        after = self.syntax_errors(modified)

        if len(after) > len(before):
            line, column = after[0]
            raise MutateError(
                f"Edit introduces a syntax error (line {line}, column {column})"
            )

        if after:
            logger.debug(f"Source already had {len(after)} syntax error node(s)")
            return [f"Source has {len(after)} pre-existing syntax error(s)"]
        return []

    def _find_error_nodes(self, root: Node) -> List[Node]:
        errors = []
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type == "ERROR" or node.is_missing:
                errors.append(node)
            stack.extend(reversed(node.children))
        return errors
