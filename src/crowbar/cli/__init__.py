"""
CLI Command Modules

Each module contains a logical group of related commands.
"""

from crowbar.cli import execution, variables

__all__ = ["execution", "variables"]
