"""
Crowbar Path Configuration

Where Crowbar keeps its own files. Everything lives under a `.crowbar`
directory next to the sources being edited (the current working directory
unless a project root is given), plus a global `~/.crowbar/config.json`.

Directory Structure:
.crowbar/
├── config.json                        # Local config overrides
├── backups/
│   └── main.rs.20240101_120000_000000.backup
└── logs/
    └── crowbar.log                    # Only with CROWBAR_FILE_LOGGING=1
"""

from datetime import datetime
from pathlib import Path
from typing import Optional


class CrowbarPaths:
    """
    Lazily resolved locations relative to project_root.
    """

    CROWBAR_DIR = ".crowbar"
    GLOBAL_DIR = Path.home() / ".crowbar"

    CONFIG_NAME = "config.json"
    LOG_NAME = "crowbar.log"
    BACKUPS_DIR = "backups"
    LOGS_DIR = "logs"

    BACKUP_TIMESTAMP = "%Y%m%d_%H%M%S_%f"

    def __init__(self, project_root: Optional[Path] = None):
        """
        Args:
            project_root: Directory holding `.crowbar`. Defaults to CWD,
                resolved on every access so a chdir is picked up.
        """
        self._project_root = project_root

    @property
    def project_root(self) -> Path:
        if self._project_root is None:
            return Path.cwd()
        return self._project_root

    @property
    def crowbar_dir(self) -> Path:
        return self.project_root / self.CROWBAR_DIR

    @property
    def local_config(self) -> Path:
        return self.crowbar_dir / self.CONFIG_NAME

    @property
    def global_config(self) -> Path:
        return self.GLOBAL_DIR / self.CONFIG_NAME

    @property
    def backups_dir(self) -> Path:
        return self.crowbar_dir / self.BACKUPS_DIR

    @property
    def logs_dir(self) -> Path:
        return self.crowbar_dir / self.LOGS_DIR

    @property
    def log_file(self) -> Path:
        return self.logs_dir / self.LOG_NAME

    def backup_name(self, source: Path, when: Optional[datetime] = None) -> str:
        """`{file name}.{timestamp}.backup`; microseconds keep rapid saves apart."""
        stamp = (when or datetime.now()).strftime(self.BACKUP_TIMESTAMP)
        return f"{Path(source).name}.{stamp}.backup"

    def ensure_dirs(self) -> None:
        """Create .crowbar and its subdirectories if missing."""
        self.backups_dir.mkdir(parents=True, exist_ok=True)
        self.logs_dir.mkdir(parents=True, exist_ok=True)


_default_paths: Optional[CrowbarPaths] = None


def get_paths(project_root: Optional[Path] = None) -> CrowbarPaths:
    """
    Shared CrowbarPaths for the working directory, or a fresh one for an
    explicit project_root.
    """
    global _default_paths
    if project_root is not None:
        return CrowbarPaths(project_root)
    if _default_paths is None:
        _default_paths = CrowbarPaths()
    return _default_paths


def reset_paths() -> None:
    """Forget the shared instance (tests change directories)."""
    global _default_paths
    _default_paths = None
