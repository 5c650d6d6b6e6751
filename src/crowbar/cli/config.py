"""
CLI Configuration

Output mode for the Crowbar CLI.
"""

import os
from typing import Optional


class CLIConfig:
    """Configuration for CLI commands"""

    HUMAN_MODE_ENV = "CROWBAR_HUMAN_MODE"

    # Indentation of JSON printed in human mode; machine mode is minified
    JSON_INDENT = 2

    _machine_mode: Optional[bool] = None

    @classmethod
    def set_machine_mode(cls, enabled: bool) -> None:
        """Set machine mode (pure data output, no presentation)"""
        cls._machine_mode = enabled

    @classmethod
    def reset(cls) -> None:
        """Forget any explicit mode so the environment decides again."""
        cls._machine_mode = None

    @classmethod
    def is_machine_mode(cls) -> bool:
        """
        Machine mode is the default; it is off only when human mode is
        requested with --human or the CROWBAR_HUMAN_MODE env var.
        """
        if cls._machine_mode is not None:
            return cls._machine_mode
        return os.getenv(cls.HUMAN_MODE_ENV, "").lower() not in ("1", "true", "yes")
