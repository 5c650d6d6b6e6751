"""
EditSession: the caller side of the editor.

Holds one source text, its tree and catalog, applies edits through the
mutation facade, keeps an in-memory undo history and writes back to disk.
A failed operation leaves text, tree and catalog exactly as they were and
records the error in last_error.
"""

import threading
from pathlib import Path
from typing import Any, Iterable, List, Optional, Union

from pydantic import BaseModel

from crowbar.exceptions import CrowbarError, MutateError
from crowbar.logging_config import logger
from crowbar.mutation import CodeEditor, EntryLocator, MutationFacade
from crowbar.parser import parse, read_source
from crowbar.parser.tree import SyntaxTree
from crowbar.schemas import CatalogEntry, EditRequest, EntryId, MutationResult, RunResult
from crowbar.values import make_value, parse_input


class EditSession:
    """
    A mutable editing session over immutable source snapshots.

    Example:
        session = EditSession.from_file(Path("main.rs"))
        session.set_value("x", "42")
        session.save()
    """

    def __init__(self, file_path: Optional[Path] = None, config: Optional[dict] = None):
        self.file_path = Path(file_path) if file_path is not None else None
        self.facade = MutationFacade(config)
        self.editor = CodeEditor(config)
        self.last_error: Optional[CrowbarError] = None

        self._lock = threading.RLock()
        self._text = ""
        self._tree: Optional[SyntaxTree] = None
        self._catalog: List[CatalogEntry] = []
        self._history: List[str] = []
        self._saved_text: Optional[str] = None
        self._file_state: Optional[str] = None

    @classmethod
    def from_file(cls, file_path: Path, config: Optional[dict] = None) -> "EditSession":
        """
        Open a .rs file.

        Raises:
            ConfigError: Unsupported extension
            ParseError: The file is not parseable
        """
        session = cls(file_path=file_path, config=config)
        text = read_source(session.file_path)
        session.load_text(text, record_history=False)
        session._saved_text = text
        session._file_state = session.editor.file_state(session.file_path)
        logger.info(f"Opened {session.file_path} ({len(session.catalog)} editable variables)")
        return session

    # State

    @property
    def text(self) -> str:
        return self._text

    @property
    def tree(self) -> Optional[SyntaxTree]:
        return self._tree

    @property
    def catalog(self) -> List[CatalogEntry]:
        return list(self._catalog)

    @property
    def can_undo(self) -> bool:
        return bool(self._history)

    @property
    def dirty(self) -> bool:
        """True when the text differs from what was last read or saved."""
        return self._saved_text is not None and self._text != self._saved_text

    def snapshot(self) -> str:
        """The current text; strings are immutable, so this is safe to hand off."""
        with self._lock:
            return self._text

    # Operations

    def load_text(self, text: str, record_history: bool = True) -> List[CatalogEntry]:
        """
        Replace the whole text, as a user typing in the editor would.

        Raises:
            ParseError: text does not parse; the previous state is kept
        """
        with self._lock:
            tree = self._guard(parse, text)
            catalog = EntryLocator(tree).entries
            if record_history and self._tree is not None and text != self._text:
                self._history.append(self._text)
            self._commit(text, tree, catalog)
            return self.catalog

    def apply(self, request: EditRequest, validate: Optional[bool] = None) -> MutationResult:
        """
        Apply one edit request to the current text.

        Raises:
            EntryNotFound, KindMismatch, MutateError: The edit was refused;
                the previous state is kept
        """
        with self._lock:
            self._require_tree()
            result = self._guard(
                self.facade.mutate,
                self._tree,
                request.entry_id,
                request.value,
                validate=validate,
                file_name=self._display_name,
            )
            if result.changed:
                new_tree = parse(result.text)
                self._history.append(self._text)
                self._commit(result.text, new_tree, EntryLocator(new_tree).entries)
            else:
                self.last_error = None
            return result

    def apply_all(self, requests: Iterable[EditRequest], validate: Optional[bool] = None) -> List[MutationResult]:
        """
        Apply several requests as one undoable step; all or nothing.
        """
        with self._lock:
            self._require_tree()
            text, results = self._guard(
                self.facade.apply_edits,
                self._text,
                list(requests),
                validate=validate,
                file_name=self._display_name,
            )
            if text != self._text:
                new_tree = parse(text)
                self._history.append(self._text)
                self._commit(text, new_tree, EntryLocator(new_tree).entries)
            return results

    def set_value(
        self,
        name: Union[str, EntryId],
        value: Any,
        occurrence: Optional[int] = None,
        validate: Optional[bool] = None,
    ) -> MutationResult:
        """
        Convenience wrapper around apply().

        Args:
            name: Entry id, its text form ("x", "x#1"), or a bare name
            value: A Value model, text to convert with the entry's kind, or a
                plain Python bool/int/float
            occurrence: Overrides the occurrence in `name`

        Raises:
            EntryNotFound: No such entry
            LiteralError: value cannot be converted to the entry's kind
        """
        with self._lock:
            entry_id = self.resolve_id(name, occurrence)
            entry = self._guard(EntryLocator(self._require_tree()).locate, entry_id)
            new_value = self._guard(self._coerce, entry, value)
            return self.apply(EditRequest(entry_id=entry_id, value=new_value), validate=validate)

    def undo(self) -> bool:
        """
        Restore the text before the last successful edit.

        Returns:
            False when there is nothing to undo
        """
        with self._lock:
            if not self._history:
                return False
            previous = self._history.pop()
            tree = parse(previous)
            self._commit(previous, tree, EntryLocator(tree).entries)
            logger.info("Undid last edit")
            return True

    def save(self, file_path: Optional[Path] = None, backup: Optional[bool] = None) -> Optional[str]:
        """
        Write the current text.

        Saving to the file the session was opened from refuses to overwrite
        changes made by someone else since it was loaded or last saved.

        Returns:
            Backup path, if one was made

        Raises:
            MutateError: No target path, external modification, or I/O failure
        """
        with self._lock:
            target = Path(file_path) if file_path is not None else self.file_path
            if target is None:
                error = MutateError("Session has no file to save to")
                self.last_error = error
                raise error

            same_file = self.file_path is not None and target.resolve() == self.file_path.resolve()
            expected_state = self._file_state if same_file else None

            editor = self.editor if backup is None else CodeEditor({**self.editor.config, "backup_enabled": backup})
            backup_path = self._guard(editor.write_source, target, self._text, expected_state)

            if same_file:
                self._saved_text = self._text
                self._file_state = editor.file_state(target)
            return backup_path

    def run(self, runner=None) -> RunResult:
        """
        Compile and run the current snapshot.

        Args:
            runner: Anything with run(source) -> RunResult; a RustRunner from
                user config by default
        """
        if runner is None:
            from crowbar.runner import RustRunner
            runner = RustRunner()
        return runner.run(self.snapshot())

    def resolve_id(self, name: Union[str, EntryId], occurrence: Optional[int] = None) -> EntryId:
        entry_id = name if isinstance(name, EntryId) else EntryId.parse(name)
        if occurrence is not None:
            entry_id = EntryId(name=entry_id.name, occurrence=occurrence)
        return entry_id

    # Internals

    @property
    def _display_name(self) -> str:
        return self.file_path.name if self.file_path is not None else "source.rs"

    def _require_tree(self) -> SyntaxTree:
        if self._tree is None:
            self._tree = parse(self._text)
            self._catalog = EntryLocator(self._tree).entries
        return self._tree

    def _commit(self, text: str, tree: SyntaxTree, catalog: List[CatalogEntry]) -> None:
        self._text = text
        self._tree = tree
        self._catalog = catalog
        self.last_error = None

    def _guard(self, func, *args, **kwargs):
        """Call func, recording any CrowbarError in last_error before re-raising."""
        try:
            return func(*args, **kwargs)
        except CrowbarError as e:
            self.last_error = e
            logger.debug(f"Session operation failed: {e}")
            raise

    @staticmethod
    def _coerce(entry: CatalogEntry, value: Any):
        if isinstance(value, BaseModel):
            return value
        if isinstance(value, str):
            return parse_input(entry.kind, value)
        return make_value(entry.kind, value)
