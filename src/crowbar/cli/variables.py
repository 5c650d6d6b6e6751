"""
CLI Variable Commands

vars, set, check
"""

from pathlib import Path
from typing import List, Optional

import typer
from rich.markup import escape
from rich.table import Table

from crowbar.exceptions import CrowbarError, EntryNotFound
from crowbar.mutation import CodeValidator
from crowbar.parser import parse, read_source
from crowbar.scanner import scan
from crowbar.schemas import CatalogEntry, display_value
from crowbar.session import EditSession
from .config import CLIConfig
from .output import fail, get_console, print_json

console = get_console()


def open_session(file: Path) -> EditSession:
    """Open a file for editing or exit with a structured error."""
    try:
        return EditSession.from_file(file)
    except (CrowbarError, OSError, UnicodeDecodeError) as e:
        fail(e, input_value=str(file))


def entry_ids(entries: List[CatalogEntry]) -> List[str]:
    return [str(entry.id) for entry in entries]


def catalog_table(file: Path, entries: List[CatalogEntry]) -> Table:
    table = Table(title=f"Editable variables in {file}")
    table.add_column("Id", style="cyan")
    table.add_column("Line", justify="right")
    table.add_column("Binding")
    table.add_column("Type")
    table.add_column("Kind", style="magenta")
    table.add_column("Value", style="green")
    table.add_column("Origin")

    for entry in entries:
        binding = f"{entry.binding} mut" if entry.mutable else entry.binding
        origin = f"const {entry.constant}" if entry.origin == "constant" else entry.origin
        table.add_row(
            escape(str(entry.id)),
            str(entry.line),
            binding,
            escape(entry.type_hint or "-"),
            entry.kind.value,
            escape(display_value(entry.value)),
            origin,
        )
    return table


def vars_cmd(
    file: Path = typer.Argument(..., help="Rust source file", exists=True, dir_okay=False),
):
    """
    List the variables whose literal values can be edited.
    """
    session = open_session(file)
    entries = session.catalog

    if CLIConfig.is_machine_mode():
        print_json({
            "status": "ok",
            "file": str(file),
            "count": len(entries),
            "variables": [entry.model_dump(mode="json") for entry in entries],
        })
        return

    if not entries:
        console.print(f"[yellow]No editable variables in {escape(str(file))}[/yellow]")
        return
    console.print(catalog_table(file, entries))


def set_cmd(
    file: Path = typer.Argument(..., help="Rust source file", exists=True, dir_okay=False),
    name: str = typer.Argument(..., help="Variable name, optionally with #occurrence (x#1)"),
    value: str = typer.Argument(..., help="New value, interpreted by the variable's kind"),
    occurrence: Optional[int] = typer.Option(None, "--occurrence", "-n", help="Which same-named declaration (0-based)"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show the diff without writing"),
    no_backup: bool = typer.Option(False, "--no-backup", help="Do not copy the file to .crowbar/backups first"),
):
    """
    Set one variable's value and write the file back.
    """
    session = open_session(file)
    entry_id = session.resolve_id(name, occurrence)

    try:
        result = session.set_value(entry_id, value)
    except EntryNotFound as e:
        fail(e, input_value=name, suggestions=entry_ids(session.catalog))
    except CrowbarError as e:
        fail(e, input_value=value)

    backup = None
    if result.changed and not dry_run:
        try:
            backup = session.save(backup=False if no_backup else None)
        except CrowbarError as e:
            fail(e, input_value=str(file))

    if CLIConfig.is_machine_mode():
        print_json({
            "status": "ok",
            "file": str(file),
            "entry": str(result.entry_id),
            "old": result.old_literal,
            "new": result.new_literal,
            "changed": result.changed,
            "written": result.changed and not dry_run,
            "backup": backup,
            "diff": result.diff,
            "warnings": result.warnings,
        })
        return

    if not result.changed:
        console.print(f"[yellow]'{escape(str(result.entry_id))}' already has that value[/yellow]")
        return
    if dry_run:
        console.print(escape(result.diff or ""))
        console.print("[dim]Dry run: file not written[/dim]")
    else:
        console.print(
            f"[green]Set {escape(str(result.entry_id))}: "
            f"{escape(result.old_literal)} -> {escape(result.new_literal)}[/green]"
        )
        if backup:
            console.print(f"[dim]Backup: {escape(backup)}[/dim]")
    for warning in result.warnings:
        console.print(f"[yellow]Warning: {escape(warning)}[/yellow]")


def check_cmd(
    file: Path = typer.Argument(..., help="Rust source file", exists=True, dir_okay=False),
):
    """
    Parse a file and report the first problem with its location.
    """
    try:
        text = read_source(file)
        tree = parse(text)
    except (CrowbarError, OSError, UnicodeDecodeError) as e:
        fail(e, input_value=str(file))

    declarations = sum(1 for _ in tree.declarations())
    entries = scan(tree)
    _, syntax_warnings = CodeValidator().validate_syntax(text)

    if CLIConfig.is_machine_mode():
        print_json({
            "status": "ok",
            "file": str(file),
            "declarations": declarations,
            "variables": len(entries),
            "syntax_warnings": syntax_warnings,
        })
        return

    console.print(
        f"[green]{escape(str(file))} parses cleanly:[/green] "
        f"{declarations} declarations, {len(entries)} editable"
    )
    for warning in syntax_warnings:
        console.print(f"[yellow]tree-sitter: {escape(warning)}[/yellow]")
