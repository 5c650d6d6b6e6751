"""
CLI Output Utilities

Machine-aware output functions that adapt based on machine mode.
"""

import json
import re
from typing import Any, Dict, NoReturn, Optional

import typer
from rich.console import Console as RichConsole
from rich.table import Table

from crowbar.cli.config import CLIConfig
from crowbar.exceptions import CrowbarError


class MachineAwareConsole:
    """
    A Console wrapper that automatically adapts output based on machine mode.
    Acts as a drop-in replacement for rich.console.Console.
    """

    def __init__(self):
        self._rich_console = RichConsole()

    def print(self, *args, **kwargs):
        """Print that respects machine mode."""
        if not CLIConfig.is_machine_mode():
            self._rich_console.print(*args, **kwargs)
            return

        for arg in args:
            if isinstance(arg, str):
                # Strip rich markup
                plain = re.sub(r"\[/?[a-z ]+\]", "", arg).strip()
                if plain:
                    print(plain)
            elif isinstance(arg, Table) or hasattr(arg, "__rich__"):
                # Tables are human-mode only; machine mode prints JSON instead
                continue
            elif arg:
                print(arg)

    def __getattr__(self, name):
        """Delegate all other attributes to the rich console."""
        return getattr(self._rich_console, name)


_console = MachineAwareConsole()


def get_console() -> MachineAwareConsole:
    return _console


def print_json(data: Dict[str, Any], minified: Optional[bool] = None) -> None:
    """
    Print JSON data. Minified in machine mode, indented in human mode.
    """
    if minified is None:
        minified = CLIConfig.is_machine_mode()

    if minified:
        typer.echo(json.dumps(data, separators=(",", ":"), ensure_ascii=False))
    else:
        typer.echo(json.dumps(data, indent=CLIConfig.JSON_INDENT, ensure_ascii=False))


def structured_error(code: str, message: str, input_value: Optional[str] = None,
                     suggestions: Optional[list] = None, **details: Any) -> dict:
    """
    Create a structured error object for machine mode.

    Args:
        code: Error code (e.g., "PARSE_ERROR", "ENTRY_NOT_FOUND")
        message: Human-readable error message
        input_value: The input that caused the error
        suggestions: List of alternative suggestions
        **details: Extra fields such as line and column

    Returns:
        Structured error dictionary
    """
    error_obj = {
        "status": "error",
        "code": code,
        "message": message,
    }
    if input_value:
        error_obj["input"] = input_value
    if suggestions:
        error_obj["suggestions"] = suggestions
    error_obj.update(details)
    return error_obj


def print_error(error: Dict[str, Any]) -> None:
    """Emit a structured error: JSON on stdout in machine mode, text on stderr otherwise."""
    if CLIConfig.is_machine_mode():
        print_json(error)
        return

    typer.echo(f"Error: {error['message']}", err=True)
    if error.get("suggestions"):
        typer.echo(f"Suggestions: {', '.join(error['suggestions'])}", err=True)


def fail(error: Exception, input_value: Optional[str] = None,
         suggestions: Optional[list] = None) -> NoReturn:
    """
    Report an exception as a structured error and exit with code 1.
    """
    if isinstance(error, CrowbarError):
        details = error.to_dict()
        code = details.pop("code")
        message = details.pop("message", str(error))
    else:
        details = {}
        code = type(error).__name__.upper()
        message = str(error)

    print_error(structured_error(code, message, input_value, suggestions, **details))
    raise typer.Exit(code=1)
