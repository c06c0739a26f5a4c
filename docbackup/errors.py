# =============================================================================
# Backup Errors
# =============================================================================
# Exception taxonomy for the backup engine.
# =============================================================================

"""Exceptions raised by the backup engine and store adapters."""

from typing import Optional

__all__ = [
    "BackupError",
    "NotInitializedError",
    "CursorExhaustedError",
    "UpstreamFailure",
    "InvalidRunModeError",
    "RunInProgressError",
]


class BackupError(Exception):
    """Base class for all backup engine errors."""


class NotInitializedError(BackupError):
    """A cursor was advanced before the query was opened."""


class CursorExhaustedError(BackupError):
    """A cursor was advanced after it reported no more results."""


class UpstreamFailure(BackupError):
    """
    A document store operation failed (network, auth, throttling, not found).

    Not retried by the engine. The original exception is kept on ``cause``
    and chained via ``raise ... from``.
    """

    def __init__(self, operation: str, message: str, cause: Optional[BaseException] = None):
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation
        self.cause = cause


class InvalidRunModeError(BackupError, ValueError):
    """The requested run mode is neither "single" nor "multi"."""

    def __init__(self, run_mode: object):
        super().__init__(f"Invalid runMode: {run_mode!r} (expected 'single' or 'multi')")
        self.run_mode = run_mode


class RunInProgressError(BackupError):
    """A controller was asked to start a run while another is active."""
