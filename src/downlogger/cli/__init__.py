"""CLI package for downlogger.

Example usage:
    downlogger log app.log "Deploy finished" --level warn
    downlogger banner app.log
    downlogger config --save
"""

from downlogger.cli.main import app

__all__ = ["app"]
