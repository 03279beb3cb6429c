"""Structured logging setup for Superscript."""

import structlog
from pathlib import Path
from typing import IO, Any
import os

# Handle behind the current WriteLoggerFactory; replaced on reconfiguration
_log_handle: IO[str] | None = None


def configure_logging(log_dir: Path | None = None) -> Path:
    """
    Configure structlog for JSON logging to ~/.cache/superscript/logs/superscript.log.

    Log level can be controlled via SUPERSCRIPT_LOG_LEVEL environment variable:
    - Set to "DEBUG" to see every debounce, flush and index refresh
    - Defaults to "INFO" if not set

    Log levels:
    - DEBUG: Timer arming, pending save replacement, index refresh details
    - INFO: Documents written, renamed, opened and deleted
    - WARNING: Skipped saves, blocked renames, stale index entries
    - ERROR: Failed writes, renames and deletes

    Args:
        log_dir: Directory for the log file (defaults to ~/.cache/superscript/logs)

    Returns:
        Path of the log file being written

    Example:
        # View logs with jq for readability:
        tail -f ~/.cache/superscript/logs/superscript.log | jq .
    """
    if log_dir is None:
        log_dir = Path.home() / ".cache" / "superscript" / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "superscript.log"

    log_level = os.environ.get("SUPERSCRIPT_LOG_LEVEL", "INFO").upper()

    valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR"]
    if log_level not in valid_levels:
        log_level = "INFO"

    global _log_handle
    if _log_handle is None or _log_handle.closed or _log_handle.name != str(log_file):
        if _log_handle is not None:
            _log_handle.close()
        _log_handle = open(log_file, "a", encoding="utf-8")

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=_log_handle),
        # Cached loggers would keep writing to a handle closed by a later call
        cache_logger_on_first_use=False,
    )
    return log_file


def get_logger(name: str) -> Any:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of calling module)

    Returns:
        Structured logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("document_saved", path="/notes/Groceries.md", size=42)
    """
    return structlog.get_logger(name)
