"""
Crowbar: inspect and edit the literal values of variables in Rust source.
"""

__version__ = "0.3.0"

from crowbar.exceptions import (
    ConfigError,
    CrowbarError,
    EntryNotFound,
    KindMismatch,
    LiteralError,
    MutateError,
    ParseError,
    RunnerError,
)
from crowbar.mutation import apply_edits, mutate
from crowbar.parser import parse, parse_file, serialize
from crowbar.runner import RustRunner
from crowbar.scanner import scan
from crowbar.session import EditSession

__all__ = [
    "__version__",
    "parse",
    "parse_file",
    "serialize",
    "scan",
    "mutate",
    "apply_edits",
    "EditSession",
    "RustRunner",
    "CrowbarError",
    "ParseError",
    "LiteralError",
    "MutateError",
    "EntryNotFound",
    "KindMismatch",
    "ConfigError",
    "RunnerError",
]
