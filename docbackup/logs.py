# =============================================================================
# Logging Setup
# =============================================================================
# Console logging plus an optional per-run log file, mirroring what the
# backup job prints to the terminal.
# =============================================================================

"""Logging configuration for backup runs."""

import json
import logging
import time
from pathlib import Path
from typing import Optional, Union

__all__ = [
    "LOG_FORMAT",
    "PayloadFormatter",
    "ConsoleHandler",
    "configure_logging",
    "attach_run_log_file",
    "detach_handler",
]

LOG_FORMAT = "%(asctime)s -> %(name)s: %(message)s"


class PayloadFormatter(logging.Formatter):
    """
    Formatter that appends a structured payload to the message.

    Payloads are passed with ``logger.info(msg, extra={"payload": {...}})``
    and rendered as indented JSON on the lines following the message.
    """

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        payload = getattr(record, "payload", None)
        if payload is None:
            return message
        return f"{message}\n{json.dumps(payload, indent=2, default=str)}"


class ConsoleHandler(logging.StreamHandler):
    """stderr handler installed once on the root logger by configure_logging."""

    def __init__(self):
        super().__init__()
        self.setFormatter(PayloadFormatter(LOG_FORMAT, datefmt="%H:%M:%S"))


def configure_logging(level: int = logging.INFO) -> None:
    """Send log records to stderr with timestamps and logger names."""
    root = logging.getLogger()
    if not any(isinstance(handler, ConsoleHandler) for handler in root.handlers):
        root.addHandler(ConsoleHandler())
    root.setLevel(level)


def attach_run_log_file(
    job_name: str,
    log_dir: Union[str, Path] = "log",
    *,
    logger: Optional[logging.Logger] = None,
) -> logging.FileHandler:
    """
    Write every record of a run to its own file.

    The file is named ``cosmos_backup_<job_name>_<epoch_ms>.log`` and the
    directory is created when missing.

    Args:
        job_name: Name of the backup job
        log_dir: Directory for log files
        logger: Logger to attach to (default: the "docbackup" logger)

    Returns:
        The attached handler; pass it to detach_handler when the run ends
    """
    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"cosmos_backup_{job_name}_{int(time.time() * 1000)}.log"

    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(PayloadFormatter(LOG_FORMAT))
    (logger or logging.getLogger("docbackup")).addHandler(handler)
    return handler


def detach_handler(
    handler: logging.Handler,
    logger: Optional[logging.Logger] = None,
) -> None:
    """Remove and close a handler added by attach_run_log_file."""
    (logger or logging.getLogger("docbackup")).removeHandler(handler)
    handler.close()
