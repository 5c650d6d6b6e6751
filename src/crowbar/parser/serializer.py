"""
Serializer: turn a (possibly edited) tree back into source text.

Output is the leaves' text in document order. Edits replace whole runs of
leaves, so nothing outside an edited span is reformatted or moved.
"""

from typing import Iterable, List, Mapping, Optional, Tuple, Union

from crowbar.exceptions import MutateError
from crowbar.schemas import Span
from .tree import SyntaxTree

Edits = Union[Mapping[Span, str], Iterable[Tuple[Span, str]]]


def _ordered(edits: Optional[Edits]) -> List[Tuple[Span, str]]:
    if not edits:
        return []
    pairs = list(edits.items()) if isinstance(edits, Mapping) else list(edits)
    pairs.sort(key=lambda pair: pair[0].start)

    previous_end = -1
    for span, _ in pairs:
        if span.start >= span.end:
            raise MutateError(f"Empty edit span {span.start}..{span.end}")
        if span.start < previous_end:
            raise MutateError(f"Overlapping edit at offset {span.start}")
        previous_end = span.end
    return pairs


def serialize(tree: SyntaxTree, edits: Optional[Edits] = None) -> str:
    """
    Concatenate the tree's leaves, substituting replacement text for edited spans.

    Args:
        tree: Parsed tree
        edits: Span -> replacement text; spans must fall on leaf boundaries

    Returns:
        Source text; equal to tree.text when there are no edits

    Raises:
        MutateError: If an edit span splits a token or overlaps another edit
    """
    pending = _ordered(edits)
    parts: List[str] = []
    index = 0
    skip_to = -1

    for node in tree.leaves():
        if node.start < skip_to:
            if node.end > skip_to:
                raise MutateError(f"Edit ending at offset {skip_to} splits a token")
            continue

        if index < len(pending):
            span, replacement = pending[index]
            if span.start == node.start:
                parts.append(replacement)
                skip_to = span.end
                index += 1
                if node.end > skip_to:
                    raise MutateError(f"Edit ending at offset {skip_to} splits a token")
                continue
            if span.start < node.end:
                raise MutateError(f"Edit starting at offset {span.start} splits a token")

        parts.append(tree.node_text(node))

    if index < len(pending) or skip_to > len(tree.text):
        raise MutateError("Edit span lies outside the source text")

    return "".join(parts)
