"""
CodeEditor: write edited source back to disk.

Backups before every overwrite, atomic temp-file-and-rename writes, and a
content check so an external change since load is not silently clobbered.
"""

import difflib
import hashlib
import os
import shutil
import tempfile
from pathlib import Path
from typing import List, Optional

from crowbar.exceptions import MutateError
from crowbar.logging_config import logger
from crowbar.paths import get_paths
from .config import get_mutation_config


def detect_line_ending(content: str) -> str:
    """
    '\r\n' when every newline in content is CRLF, otherwise '\n'.

    Mixed files count as LF so nothing outside an edit is rewritten.
    """
    crlf = content.count("\r\n")
    if crlf and crlf == content.count("\n"):
        return "\r\n"
    return "\n"


def match_line_endings(text: str, line_ending: str) -> str:
    """Rewrite bare LFs in text to line_ending."""
    if line_ending == "\n":
        return text
    return text.replace("\r\n", "\n").replace("\n", line_ending)


def generate_unified_diff(
    file_name: str,
    original_content: str,
    modified_content: str,
    max_diff_lines: int = 100
) -> str:
    """
    Unified diff between two versions of a source.

    Args:
        file_name: Name for the a/ and b/ headers
        original_content: Text before the edit
        modified_content: Text after the edit
        max_diff_lines: Diffs longer than this are cut, removals kept first

    Returns:
        Diff text, empty when the versions are equal
    """
    diff_lines = list(difflib.unified_diff(
        original_content.splitlines(keepends=True),
        modified_content.splitlines(keepends=True),
        fromfile=f"a/{file_name}",
        tofile=f"b/{file_name}",
    ))

    if len(diff_lines) > max_diff_lines:
        return _truncate_large_diff(diff_lines, max_diff_lines)

    return "".join(diff_lines)


def _truncate_large_diff(diff_lines: List[str], max_lines: int) -> str:
    header_lines = []
    deleted_lines = []
    other_lines = []

    for line in diff_lines:
        if line.startswith(("---", "+++", "@@")):
            header_lines.append(line)
        elif line.startswith("-"):
            deleted_lines.append(line)
        else:
            other_lines.append(line)

    kept = header_lines + deleted_lines
    remaining = max(max_lines - len(kept), 0)
    kept.extend(other_lines[:remaining])

    dropped = len(other_lines) - remaining
    if dropped > 0:
        kept.append(f"\n[... {dropped} more diff lines truncated ...]\n")
    return "".join(kept)


class CodeEditor:
    """
    Persist source text with a backup and an atomic replace.
    """

    def __init__(self, config: Optional[dict] = None):
        """
        Args:
            config: Optional overrides merged over get_mutation_config()
        """
        self.config = {**get_mutation_config(), **(config or {})}

    @staticmethod
    def file_state(file_path: Path) -> str:
        """SHA-256 of the file's bytes, or "" when it does not exist."""
        path = Path(file_path)
        if not path.exists():
            return ""
        with open(path, "rb") as f:
            return hashlib.sha256(f.read()).hexdigest()

    def write_source(
        self,
        file_path: Path,
        content: str,
        expected_state: Optional[str] = None
    ) -> Optional[str]:
        """
        Replace a file's contents.

        Args:
            file_path: Target file
            content: Full new text, written byte-exact (no newline translation)
            expected_state: file_state() captured when the text was loaded;
                the write is refused if the file changed since

        Returns:
            Path of the backup copy, or None when backups are off or the file
            is new

        Raises:
            MutateError: File changed externally, or backup/write failed
        """
        path = Path(file_path)

        # 1. Refuse to overwrite someone else's change
        if expected_state is not None:
            current_state = self.file_state(path)
            if current_state != expected_state:
                raise MutateError(f"File modified externally since it was loaded: {path}")

        # 2. Backup
        backup_path = None
        if self.config["backup_enabled"] and path.exists():
            backup_path = self.create_backup(path)

        # 3. Atomic write
        self._atomic_write(path, content)
        logger.info(f"Wrote {len(content)} characters to {path}")
        return backup_path

    def create_backup(self, file_path: Path) -> str:
        """
        Copy a file into the backup directory under a timestamped name.

        Raises:
            MutateError: If the copy fails
        """
        path = Path(file_path)
        backup_dir = Path(self.config["backup_dir"])

        backup_path = backup_dir / get_paths().backup_name(path)

        try:
            backup_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(str(path), str(backup_path))
        except OSError as e:
            raise MutateError(f"Failed to back up {path}: {e}")

        logger.debug(f"Created backup: {backup_path}")
        return str(backup_path)

    def restore_backup(self, backup_path: str, target_path: Path) -> None:
        """Copy a backup over target_path."""
        try:
            shutil.copy2(backup_path, str(target_path))
        except OSError as e:
            raise MutateError(f"Failed to restore {target_path} from {backup_path}: {e}")
        logger.info(f"Restored {target_path} from backup")

    def _atomic_write(self, path: Path, content: str) -> None:
        # Temp file in the target's directory so the rename stays on one filesystem
        try:
            fd, temp_path = tempfile.mkstemp(
                dir=str(path.parent),
                prefix=f".{path.name}.",
                suffix=".tmp"
            )
        except OSError as e:
            raise MutateError(f"Failed to create temp file next to {path}: {e}")

        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(content)
            os.replace(temp_path, str(path))
        except OSError as e:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise MutateError(f"Failed to write {path}: {e}")

        logger.debug(f"Atomic write completed: {path}")

    def generate_unified_diff(self, file_name: str, original_content: str, modified_content: str) -> str:
        return generate_unified_diff(
            file_name,
            original_content,
            modified_content,
            max_diff_lines=self.config["max_diff_lines"],
        )
