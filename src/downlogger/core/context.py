"""Label-prefixing wrapper returned by ``Logger.in_context``."""

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from downlogger.core.logger import Logger


@dataclass(frozen=True)
class LoggerContext:
    """Logs INFO lines prefixed with ``[<name>] ``.

    Attributes:
        name: Context label, e.g. "WebServer".
        logger: Owning logger.
        file_only: Route through ``Logger.finfo`` instead of ``Logger.info``,
            skipping the console echo.
    """

    name: str
    logger: "Logger"
    file_only: bool = False

    def info(self, message: str) -> None:
        """Log a message under this context."""
        line = f"[{self.name}] {message}"
        if self.file_only:
            self.logger.finfo(line)
        else:
            self.logger.info(line)
