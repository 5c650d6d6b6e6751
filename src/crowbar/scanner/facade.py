from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional

from crowbar.exceptions import LiteralError
from crowbar.logging_config import logger
from crowbar.parser.tree import Declaration, SyntaxTree
from crowbar.schemas import CatalogEntry, EntryId, Span
from crowbar.tracing import trace
from crowbar.values import decode, kind_of
from .classifier import InitializerClassifier
from .config import CONSTANT_BINDINGS


@dataclass(frozen=True)
class ConstantDefinition:
    name: str
    start: int  # Offset of the declaration, for nearest-definition lookup
    literal: str


def _constant_table(
    tree: SyntaxTree,
    declarations: List[Declaration],
    classifier: InitializerClassifier,
) -> Dict[str, List[ConstantDefinition]]:
    """
    Named constants with a literal initializer, keyed by name, each list in
    document order. Mutable statics are not constants.
    """
    table: Dict[str, List[ConstantDefinition]] = {}
    for decl in declarations:
        if decl.binding not in CONSTANT_BINDINGS or decl.mutable:
            continue
        if decl.initializer is None or not decl.terminated:
            continue
        span = classifier.direct_literal(decl.initializer)
        if span is None:
            continue
        literal = tree.text[span.start:span.end]
        table.setdefault(decl.name, []).append(
            ConstantDefinition(name=decl.name, start=decl.start, literal=literal)
        )
    return table


def _resolve_constant(
    table: Dict[str, List[ConstantDefinition]],
    name: str,
    offset: int,
) -> Optional[ConstantDefinition]:
    """Nearest definition before offset, else the first one after it."""
    candidates = table.get(name)
    if not candidates:
        return None
    preceding = [c for c in candidates if c.start < offset]
    return preceding[-1] if preceding else candidates[0]


@trace
def scan(tree: SyntaxTree) -> List[CatalogEntry]:
    """
    Catalog the editable variables of a parsed source.

    Every single-name declaration counts toward the per-name occurrence
    index, whether or not it ends up in the catalog, so identities do not
    shift when an unrelated initializer changes shape.

    Args:
        tree: Parsed source

    Returns:
        Catalog entries in document order
    """
    declarations = [decl for decl in tree.declarations() if decl.name]
    classifier = InitializerClassifier(tree)
    constants = _constant_table(tree, declarations, classifier)

    entries: List[CatalogEntry] = []
    occurrences: Counter = Counter()

    for decl in declarations:
        occurrence = occurrences[decl.name]
        occurrences[decl.name] += 1
        entry_id = EntryId(name=decl.name, occurrence=occurrence)

        classification = classifier.classify(decl)
        if classification is None:
            logger.debug(f"Skipping '{entry_id}': initializer is not a literal")
            continue

        literal_span = classification.span
        constant_name = None
        if classification.origin == "constant":
            definition = _resolve_constant(constants, classification.reference, decl.start)
            if definition is None or definition.start == decl.start:
                logger.debug(f"Skipping '{entry_id}': '{classification.reference}' is not a literal constant")
                continue
            literal = definition.literal
            constant_name = definition.name
        else:
            literal = tree.text[literal_span.start:literal_span.end]

        try:
            value = decode(literal)
        except LiteralError as e:
            logger.warning(f"Skipping '{entry_id}' at line {tree.position(literal_span.start)[0]}: {e}")
            continue

        type_hint = tree.node_text(decl.type_node).strip() if decl.type_node is not None else None

        entries.append(CatalogEntry(
            id=entry_id,
            name=decl.name,
            binding=decl.binding,
            mutable=decl.mutable,
            type_hint=type_hint,
            kind=kind_of(value),
            value=value,
            origin=classification.origin,
            constant=constant_name,
            line=tree.position(literal_span.start)[0],
            span=Span(start=literal_span.start, end=literal_span.end),
        ))

    logger.debug(f"Catalogued {len(entries)} of {len(declarations)} declarations")
    return entries


def find_entry(entries: List[CatalogEntry], entry_id: EntryId) -> Optional[CatalogEntry]:
    for entry in entries:
        if entry.id == entry_id:
            return entry
    return None
