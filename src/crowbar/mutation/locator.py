"""
EntryLocator: resolve an entry id to its current catalog entry.

Spans are never cached across edits; every locator scans the tree it was
given.
"""

from typing import List, Optional

from crowbar.exceptions import EntryNotFound
from crowbar.parser.tree import SyntaxTree
from crowbar.scanner import find_entry, scan
from crowbar.schemas import CatalogEntry, EntryId


class EntryLocator:
    """Lazily scans one tree and answers lookups against that catalog."""

    def __init__(self, tree: SyntaxTree):
        self.tree = tree
        self._entries: Optional[List[CatalogEntry]] = None

    @property
    def entries(self) -> List[CatalogEntry]:
        if self._entries is None:
            self._entries = scan(self.tree)
        return self._entries

    def find(self, entry_id: EntryId) -> Optional[CatalogEntry]:
        return find_entry(self.entries, entry_id)

    def locate(self, entry_id: EntryId) -> CatalogEntry:
        """
        Args:
            entry_id: Identity to resolve

        Returns:
            The entry with that identity in this tree

        Raises:
            EntryNotFound: No editable declaration has that identity
        """
        entry = self.find(entry_id)
        if entry is None:
            raise EntryNotFound(entry_id)
        return entry

    def by_name(self, name: str) -> List[CatalogEntry]:
        """All entries bound to `name`, in occurrence order."""
        return [entry for entry in self.entries if entry.name == name]
