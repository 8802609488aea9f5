"""
Logging for ca1-deploy.

Every module logs under the ``ca1-deploy`` namespace. The terminal gets Rich
output; ``--log-file`` adds a plain text copy, or with ``--json-log`` one JSON
object per line recording which resource was reused, created, repaired or
deleted.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

LOGGER_NAME = "ca1-deploy"

DEPLOY_THEME = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "bold green",
        "hint": "dim",
        "outcome.created": "bold green",
        "outcome.existing": "cyan",
        "outcome.repaired": "bold yellow",
    }
)

console = Console(theme=DEPLOY_THEME)

# Set by the reconciler through ``extra=``.
RESOURCE_FIELDS = ("resource_kind", "resource_name", "action")


class JSONFileHandler(logging.Handler):
    """Appends one JSON object per record, with the resource fields when set."""

    def __init__(self, filepath: str) -> None:
        super().__init__()
        self.filepath = Path(filepath)
        self.filepath.parent.mkdir(parents=True, exist_ok=True)

    def to_entry(self, record: logging.LogRecord) -> dict:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update({name: getattr(record, name) for name in RESOURCE_FIELDS if hasattr(record, name)})
        return entry

    def emit(self, record: logging.LogRecord) -> None:
        try:
            with open(self.filepath, "a", encoding="utf-8") as f:
                f.write(json.dumps(self.to_entry(record)) + "\n")
        except Exception:
            self.handleError(record)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    json_log: bool = False,
) -> logging.Logger:
    """
    Route ``ca1-deploy`` log records to the console and, optionally, a file.

    Calling it again replaces the handlers, so the stand-alone commands and
    the group can both call it.

    Args:
        level: Console level name; unknown names fall back to INFO.
        log_file: File that receives every record down to DEBUG.
        json_log: Write ``log_file`` as JSON lines instead of plain text.

    Returns:
        The ``ca1-deploy`` logger.
    """
    console_level = getattr(logging, level.upper(), logging.INFO)

    deploy_logger = logging.getLogger(LOGGER_NAME)
    deploy_logger.handlers.clear()

    rich_handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    rich_handler.setLevel(console_level)
    deploy_logger.addHandler(rich_handler)

    if log_file:
        if json_log:
            file_handler: logging.Handler = JSONFileHandler(log_file)
        else:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s"))
        file_handler.setLevel(logging.DEBUG)
        deploy_logger.addHandler(file_handler)

    # The file keeps DEBUG even when the console is quieter.
    deploy_logger.setLevel(logging.DEBUG if log_file else console_level)
    return deploy_logger
