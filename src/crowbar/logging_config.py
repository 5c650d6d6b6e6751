import os
import sys

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"

_TRUTHY = ("1", "true", "yes")

# Flag to track if logging has been configured
_logging_configured = False


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").lower() in _TRUTHY


def setup_logging(level=None, suppress_console=None, enable_file_logging=None):
    """
    Configures the global logger.

    The console sink writes to stderr so stdout stays free for JSON. File
    logging is opt-in via CROWBAR_FILE_LOGGING=1 or enable_file_logging=True
    and goes to .crowbar/logs/crowbar.log.

    The first call wins unless arguments are given; the CLI calls again with
    explicit arguments once it knows the output mode.

    Args:
        level: Console level. If None, CROWBAR_LOG_LEVEL or INFO.
        suppress_console: If True, no console sink. If None, check CROWBAR_MACHINE_MODE env var.
        enable_file_logging: If True, add the file sink. If None, check CROWBAR_FILE_LOGGING env var.
    """
    global _logging_configured

    explicit = any(arg is not None for arg in (level, suppress_console, enable_file_logging))
    if _logging_configured and not explicit:
        return
    _logging_configured = True

    logger.remove()

    if level is None:
        level = os.getenv("CROWBAR_LOG_LEVEL", "INFO").upper()
    if suppress_console is None:
        suppress_console = _env_flag("CROWBAR_MACHINE_MODE")
    if enable_file_logging is None:
        enable_file_logging = _env_flag("CROWBAR_FILE_LOGGING")

    if not suppress_console:
        logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, colorize=True)

    if enable_file_logging:
        from crowbar.paths import get_paths
        paths = get_paths()
        paths.ensure_dirs()

        # Edits and runs only; debug traces stay on the console
        logger.add(
            paths.log_file,
            level="INFO",
            format=FILE_FORMAT,
            rotation="10 MB",
            retention="1 day",
            compression="gz",
            catch=True,
        )


# Configure the logger on import (will check env var for machine mode)
setup_logging()
