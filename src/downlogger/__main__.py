"""Entry point for running downlogger as a module.

Usage:
    python -m downlogger log app.log "Deploy finished"
    python -m downlogger banner app.log
    python -m downlogger config
    python -m downlogger --help
"""


def main() -> None:
    """Main entry point - delegates to Typer CLI app."""
    from downlogger.cli.main import app

    app()


if __name__ == "__main__":
    main()
