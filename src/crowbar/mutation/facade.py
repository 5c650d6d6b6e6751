"""
MutationFacade: change one catalog entry's value and produce the new source.

Pipeline per edit:
1. Resolve the entry id against a fresh scan (EntryLocator)
2. Check the value kind
3. Encode the value in the literal's existing style (values.encode)
4. Replace the initializer span, leaving every other character alone (serialize)
5. Re-parse and confirm the entry now holds the new value
6. Optionally check the output with tree-sitter (CodeValidator)
"""

from typing import Any, Dict, Iterable, List, Optional, Tuple

from crowbar.exceptions import KindMismatch, MutateError, ParseError
from crowbar.logging_config import logger
from crowbar.parser import parse, serialize
from crowbar.parser.tree import SyntaxTree
from crowbar.schemas import (
    CatalogEntry,
    EditRequest,
    EntryId,
    IntegerValue,
    MutationResult,
    ValueKind,
)
from crowbar.tracing import trace
from crowbar.values import encode, same_value
from .config import DEFAULT_INTEGER_TYPE, INTEGER_RANGES, get_mutation_config
from .editor import detect_line_ending, generate_unified_diff, match_line_endings
from .locator import EntryLocator
from .validator import CodeValidator


class MutationFacade:
    """
    Main entry point for value edits. Holds the tree-sitter validator so its
    parser is built once.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = {**get_mutation_config(), **(config or {})}
        self._validator: Optional[CodeValidator] = None

    @property
    def validator(self) -> CodeValidator:
        if self._validator is None:
            self._validator = CodeValidator()
        return self._validator

    def mutate(
        self,
        tree: SyntaxTree,
        entry_id: EntryId,
        new_value,
        validate: Optional[bool] = None,
        file_name: str = "source.rs",
    ) -> MutationResult:
        """
        Set one entry to a new value.

        Args:
            tree: Parsed current source
            entry_id: Entry to change
            new_value: Value of the same kind as the entry
            validate: Run the tree-sitter check; None uses editor.validate_syntax
            file_name: Name shown in the diff headers

        Returns:
            MutationResult with the complete new text

        Raises:
            EntryNotFound: No entry with that id in tree
            KindMismatch: new_value is of a different kind
            MutateError: The edited text did not re-parse to the new value,
                or introduced a syntax error
        """
        # 1. Locate
        entry = EntryLocator(tree).locate(entry_id)

        # 2. Kind
        if ValueKind(new_value.kind) is not entry.kind:
            raise KindMismatch(entry_id, entry.kind.value, new_value.kind)

        # 3. Encode
        old_literal = tree.text[entry.span.start:entry.span.end]
        if same_value(entry.value, new_value):
            new_literal = old_literal
        else:
            new_literal = encode(new_value, entry.value.style)
            new_literal = match_line_endings(new_literal, detect_line_ending(tree.text))

        warnings = self._range_warnings(entry, new_value)

        if new_literal == old_literal:
            logger.debug(f"'{entry_id}' already holds that value")
            return MutationResult(
                text=tree.text,
                entry_id=entry_id,
                span=entry.span,
                old_literal=old_literal,
                new_literal=new_literal,
                diff="",
                warnings=warnings,
            )

        # 4. Replace
        text = serialize(tree, {entry.span: new_literal})

        # 5. Confirm
        self._confirm(text, entry_id, new_value)

        # 6. Syntax check
        if validate is None:
            validate = self.config["validate_syntax"]
        if validate:
            warnings.extend(self.validator.check_edit(tree.text, text))

        logger.info(f"Set '{entry_id}' at line {entry.line}: {old_literal} -> {new_literal}")
        return MutationResult(
            text=text,
            entry_id=entry_id,
            span=entry.span,
            old_literal=old_literal,
            new_literal=new_literal,
            diff=generate_unified_diff(
                file_name, tree.text, text, max_diff_lines=self.config["max_diff_lines"]
            ),
            warnings=warnings,
        )

    def apply_edits(
        self,
        text: str,
        requests: Iterable[EditRequest],
        validate: Optional[bool] = None,
        file_name: str = "source.rs",
    ) -> Tuple[str, List[MutationResult]]:
        """
        Apply requests in order, re-parsing between them.

        Either every request applies or the first failure propagates; the
        caller's text is never half-edited.

        Returns:
            (final_text, one MutationResult per request)
        """
        current = text
        results: List[MutationResult] = []

        for request in requests:
            result = self.mutate(
                parse(current),
                request.entry_id,
                request.value,
                validate=validate,
                file_name=file_name,
            )
            results.append(result)
            current = result.text

        return current, results

    def _confirm(self, text: str, entry_id: EntryId, new_value) -> None:
        try:
            new_tree = parse(text)
        except ParseError as e:
            raise MutateError(f"Edited source no longer parses: {e}")

        resolved = EntryLocator(new_tree).find(entry_id)
        if resolved is None or not same_value(resolved.value, new_value):
            raise MutateError(f"Edited source does not hold the new value for '{entry_id}'")

    def _range_warnings(self, entry: CatalogEntry, new_value) -> List[str]:
        """Warn when an integer will not fit the type rustc infers for it."""
        if not isinstance(new_value, IntegerValue):
            return []

        type_name = entry.value.style.suffix or entry.type_hint or DEFAULT_INTEGER_TYPE
        if type_name not in INTEGER_RANGES:
            return []

        low, high = INTEGER_RANGES[type_name]
        if low <= new_value.value <= high:
            return []
        return [f"{new_value.value} is out of range for {type_name} ({low}..={high})"]


_default_facade: Optional[MutationFacade] = None


def _facade() -> MutationFacade:
    global _default_facade
    if _default_facade is None:
        _default_facade = MutationFacade()
    return _default_facade


@trace
def mutate(
    tree: SyntaxTree,
    entry_id: EntryId,
    new_value,
    validate: Optional[bool] = None,
) -> MutationResult:
    """Set one entry to new_value; see MutationFacade.mutate."""
    return _facade().mutate(tree, entry_id, new_value, validate=validate)


@trace
def apply_edits(
    text: str,
    requests: Iterable[EditRequest],
    validate: Optional[bool] = None,
) -> Tuple[str, List[MutationResult]]:
    """Apply several edits in order; see MutationFacade.apply_edits."""
    return _facade().apply_edits(text, requests, validate=validate)
