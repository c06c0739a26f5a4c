"""Dagster Jobs - Executable Workflows."""

from .backup_job import container_backup_job

__all__ = ["container_backup_job"]
