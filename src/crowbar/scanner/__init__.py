"""
Declaration scanner: finds the variables whose initializers can be edited.
Other packages should import from here, not from the internal modules.
"""
from .facade import find_entry, scan

__all__ = ["scan", "find_entry"]
