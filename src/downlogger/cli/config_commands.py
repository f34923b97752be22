"""Configuration command: show and save the effective settings."""

from pathlib import Path

import typer
from rich.table import Table

from downlogger.cli.utils import console, print_success
from downlogger.config import get_config_file_path, get_settings, save_yaml_config


def config(
    save: bool = typer.Option(False, "--save", help="Write the effective settings to YAML."),
    path: Path | None = typer.Option(None, "--path", help="YAML file to save to."),
) -> None:
    """Show the effective downlogger settings."""
    settings = get_settings()
    source = get_config_file_path()

    table = Table(title="downlogger settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for name, value in settings.to_yaml_dict().items():
        table.add_row(name, str(value))

    console.print(table)
    console.print(f"[dim]Config file:[/dim] {source or 'none (defaults and environment)'}")

    if save:
        saved = save_yaml_config(settings.to_yaml_dict(), path)
        print_success(f"Saved configuration to {saved}")
