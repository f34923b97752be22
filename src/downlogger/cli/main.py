"""Main CLI application for downlogger.

Usage:
    downlogger log FILE MESSAGE...    Append a leveled message
    downlogger banner FILE            Write a session banner
    downlogger demo FILE              Write demo lines
    downlogger config [--save]        Show effective settings
    downlogger --help                 Show help
"""

import typer
from rich.console import Console

from downlogger.cli import commands, config_commands
from downlogger.config import get_settings
from downlogger.core.logging import configure_logging

app = typer.Typer(
    name="downlogger",
    help="downlogger CLI - append buffered, timestamped log lines to files.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    pretty_exceptions_enable=False,
)

console = Console()

app.command(name="log")(commands.log)
app.command(name="banner")(commands.banner)
app.command(name="demo")(commands.demo)
app.command(name="config")(config_commands.config)


@app.callback(invoke_without_command=True)  # type: ignore[untyped-decorator]
def main(ctx: typer.Context) -> None:
    """downlogger CLI.

    Use 'downlogger COMMAND --help' for more information on a command.
    """
    settings = get_settings()
    configure_logging(log_format=settings.log_format, log_level=settings.log_level)

    if ctx.invoked_subcommand is None:
        console.print()
        console.print("[bold blue]downlogger[/bold blue]")
        console.print()
        console.print("Use [green]downlogger --help[/green] to see available commands.")
        console.print()
        raise typer.Exit(0)


if __name__ == "__main__":
    app()
