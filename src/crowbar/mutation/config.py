"""
Settings for the tree mutator and the file writer.
"""

from crowbar.paths import get_paths
from crowbar.user_config import get_user_config


def get_mutation_config():
    """
    Mutation settings with paths and user overrides resolved at call time,
    so tests that change the working directory or config see the change.
    """
    paths = get_paths()
    user_config = get_user_config()
    return {
        "backup_enabled": bool(user_config.get("editor.backup_enabled", True)),
        "backup_dir": str(paths.backups_dir),
        "validate_syntax": bool(user_config.get("editor.validate_syntax", True)),
        "max_diff_lines": 100,
    }


# (min, max) per integer type, for out-of-range warnings
INTEGER_RANGES = {
    "i8": (-(2 ** 7), 2 ** 7 - 1),
    "i16": (-(2 ** 15), 2 ** 15 - 1),
    "i32": (-(2 ** 31), 2 ** 31 - 1),
    "i64": (-(2 ** 63), 2 ** 63 - 1),
    "i128": (-(2 ** 127), 2 ** 127 - 1),
    "isize": (-(2 ** 63), 2 ** 63 - 1),
    "u8": (0, 2 ** 8 - 1),
    "u16": (0, 2 ** 16 - 1),
    "u32": (0, 2 ** 32 - 1),
    "u64": (0, 2 ** 64 - 1),
    "u128": (0, 2 ** 128 - 1),
    "usize": (0, 2 ** 64 - 1),
}

# rustc's default when neither a suffix nor a type hint says otherwise
DEFAULT_INTEGER_TYPE = "i32"
