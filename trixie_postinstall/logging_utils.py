from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

DEFAULT_LOG_PATH = str(Path.home() / ".local" / "state" / "trixie-postinstall" / "postinstall.log")

_MARKERS = {
    logging.DEBUG: ("[.]", "\033[90m"),
    logging.INFO: ("[i]", "\033[36m"),
    logging.WARNING: ("[!]", "\033[33m"),
    logging.ERROR: ("[x]", "\033[31m"),
    logging.CRITICAL: ("[x]", "\033[31m"),
}
_RESET = "\033[0m"


class ConsoleFormatter(logging.Formatter):
    """Operator-facing one-liners: a colored marker and the message."""

    def __init__(self, color: bool = True) -> None:
        super().__init__("%(message)s")
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        marker, color = _MARKERS.get(record.levelno, ("[?]", ""))
        if self.color:
            marker = f"{color}{marker}{_RESET}"
        return f"{marker} {super().format(record)}"


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    also_console: bool = True,
) -> str:
    """Configure logging.

    Every command and decision goes to the log file at full detail; the
    console only gets the marker lines. When log_path is not writable the
    file falls back to the working directory.

    Returns the actual file path being used.
    """

    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_trixie_configured", False):
        return getattr(logger, "_trixie_log_path", log_path)

    chosen_path = log_path
    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    file_handler: Optional[logging.Handler] = None
    try:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
    except OSError:
        chosen_path = str(Path.cwd() / "trixie-postinstall.log")
        file_handler = logging.FileHandler(chosen_path, encoding="utf-8")
    file_handler.setFormatter(fmt)
    file_handler.setLevel(logging.DEBUG)
    handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(ConsoleFormatter(color=sys.stderr.isatty()))
        console.setLevel(level)
        handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_trixie_configured", True)
    setattr(logger, "_trixie_log_path", chosen_path)

    logging.getLogger(__name__).debug(
        "Logging initialized (requested=%s, actual=%s)", log_path, chosen_path
    )
    return chosen_path
