import typer

from crowbar import __version__
from crowbar.logging_config import setup_logging
from crowbar.cli import execution, variables
from crowbar.cli.config import CLIConfig

app = typer.Typer(no_args_is_help=True)


# Global CLI callback for flags that apply to all commands
@app.callback()
def global_options(
    human: bool = typer.Option(
        False,
        "--human",
        "-H",
        help="Enable human mode: tables and colors (also via CROWBAR_HUMAN_MODE env var)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr"),
):
    """
    Crowbar: inspect and edit literal variables in Rust source.

    Machine mode is DEFAULT (compact JSON on stdout).
    Use --human/-H for pretty output.
    """
    if human:
        CLIConfig.set_machine_mode(False)
    else:
        CLIConfig.reset()

    # Machine mode keeps stderr quiet unless debugging was asked for
    setup_logging(
        level="DEBUG" if verbose else "INFO",
        suppress_console=CLIConfig.is_machine_mode() and not verbose,
    )


app.command(name="vars")(variables.vars_cmd)
app.command(name="set")(variables.set_cmd)
app.command(name="check")(variables.check_cmd)
app.command(name="run")(execution.run_cmd)


@app.command()
def version():
    """
    Prints the current version of Crowbar.
    """
    typer.echo(f"Crowbar v{__version__}")


if __name__ == "__main__":
    app()
