"""Dagster Ops - Reusable Computation Units."""

from .backup_ops import BackupRunConfig, backup_container

__all__ = [
    "BackupRunConfig",
    "backup_container",
]
