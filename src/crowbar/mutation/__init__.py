"""
Mutation package: value edits on parsed Rust source.

Edits are addressed by entry id rather than by offset, and touch only the
initializer span of the edited declaration.
"""

from .facade import MutationFacade, apply_edits, mutate
from .locator import EntryLocator
from .editor import CodeEditor, generate_unified_diff
from .validator import CodeValidator
from .config import get_mutation_config

__all__ = [
    # Main facade
    "MutationFacade",
    "mutate",
    "apply_edits",

    # Components
    "EntryLocator",
    "CodeEditor",
    "CodeValidator",
    "generate_unified_diff",

    # Configuration
    "get_mutation_config",
]
