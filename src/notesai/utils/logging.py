"""JSON-lines logging for notesai.

Modules log through ``structlog.get_logger()`` with snake_case event
names and keyword context. configure_logging() routes those events to
``notesai.log`` in the directory named by the ``logging`` config
section. Until it is called, structlog's console defaults apply.
"""

from pathlib import Path
from typing import IO, Optional

import structlog

from notesai.models.config import LoggingConfig

LOG_FILE = "notesai.log"

_stream: Optional[IO[str]] = None


def configure_logging(settings: Optional[LoggingConfig] = None) -> Path:
    """
    Send structured logs to a JSON-lines file.

    Calling again (every CLI invocation does) closes the previous file and
    applies the new settings. Loggers are not cached, so module-level
    ``logger`` objects follow the change immediately.

    Levels:
    - DEBUG: block mutations, history depth, debounce restarts
    - INFO: documents loaded, created and deleted, undo/redo, autosaves
    - WARNING: unknown block ids, stale saves skipped
    - ERROR: failed saves, corrupt documents

    Args:
        settings: Log directory and minimum level (defaults if None)

    Returns:
        Path of the log file

    Example:
        NOTESAI_LOG_LEVEL=DEBUG notesai add <document> "Buy milk"
        tail -f ~/.cache/notesai/logs/notesai.log | jq .
    """
    global _stream

    settings = settings or LoggingConfig()
    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE

    _close_stream()
    _stream = log_file.open("a", encoding="utf-8")

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(settings.level),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=_stream),
        cache_logger_on_first_use=False,
    )
    return log_file


def reset_logging() -> None:
    """Close the log file and restore structlog's defaults."""
    _close_stream()
    structlog.reset_defaults()


def _close_stream() -> None:
    global _stream

    if _stream is not None and not _stream.closed:
        _stream.close()
    _stream = None
