"""
CLI Execution Commands

run
"""

from pathlib import Path
from typing import List, Optional

import typer
from rich.markup import escape
from rich.panel import Panel

from crowbar.exceptions import CrowbarError, EntryNotFound
from crowbar.runner import RustRunner
from .config import CLIConfig
from .output import fail, get_console, print_json
from .variables import entry_ids, open_session

console = get_console()


def parse_assignment(assignment: str):
    """Split NAME=VALUE; the value may itself contain '='."""
    name, sep, value = assignment.partition("=")
    if not sep or not name.strip():
        raise typer.BadParameter(f"expected NAME=VALUE, got {assignment!r}", param_hint="--set")
    return name.strip(), value


def run_cmd(
    file: Path = typer.Argument(..., help="Rust source file", exists=True, dir_okay=False),
    assignments: Optional[List[str]] = typer.Option(
        None, "--set", "-s", help="NAME=VALUE edit applied in memory before compiling (repeatable)"
    ),
    rustc: Optional[str] = typer.Option(None, "--rustc", help="Compiler command (default from config)"),
):
    """
    Apply edits in memory, compile with rustc and run the program.

    The file on disk is not modified.
    """
    session = open_session(file)
    pairs = [parse_assignment(item) for item in assignments or []]

    for name, value in pairs:
        try:
            session.set_value(name, value)
        except EntryNotFound as e:
            fail(e, input_value=name, suggestions=entry_ids(session.catalog))
        except CrowbarError as e:
            fail(e, input_value=f"{name}={value}")

    try:
        runner = RustRunner(rustc=rustc)
    except CrowbarError as e:
        fail(e)

    result = session.run(runner)

    if CLIConfig.is_machine_mode():
        print_json({
            "status": "ok" if result.success else "failed",
            "file": str(file),
            "edits": [f"{name}={value}" for name, value in pairs],
            **result.model_dump(mode="json"),
        })
    else:
        title = f"{result.stage}: {'ok' if result.success else 'failed'} ({result.duration:.2f}s)"
        if result.stdout:
            console.print(Panel(escape(result.stdout), title=f"stdout - {title}"))
        if result.stderr:
            console.print(Panel(escape(result.stderr), title=f"stderr - {title}", border_style="red"))
        if not result.stdout and not result.stderr:
            console.print(f"[dim]{title}, no output[/dim]")

    if not result.success:
        raise typer.Exit(code=1)
