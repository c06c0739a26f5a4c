# =============================================================================
# Backup Ops - Container backup
# =============================================================================
# Runs a container backup job from Dagster run config.
# =============================================================================

"""Dagster op running a container backup."""

import asyncio
from typing import Any, Dict

from dagster import Config, OpExecutionContext, op
from pydantic import Field

from docbackup.engine import ContainerBackupJob
from docbackup.models import QuerySpec, RunOptions


__all__ = ["BackupRunConfig", "backup_container"]


class BackupRunConfig(Config):
    """Run config for backup_container."""

    job_name: str = Field("ContainerBackup", description="Job name tagging every backup")
    query_filter: Dict[str, Any] = Field(default={}, description="Source filter document")
    query_parameters: Dict[str, Any] = Field(default={}, description="Named filter parameters")
    page_size: int = Field(100, description="Documents fetched per page")
    dry_run: bool = Field(True, description="Skip every write when true")
    run_mode: str = Field("single", description="'single' or 'multi'")


def _backup_container(
    source_store,
    backup_store,
    config: BackupRunConfig,
    log,
) -> Dict[str, Any]:
    """
    Core logic for a container backup.

    This function is extracted for easier unit testing without Dagster context.

    Args:
        source_store: DocumentStoreResource of the container to back up
        backup_store: DocumentStoreResource of the backup container
        config: Run config
        log: Logger instance (context.log)

    Returns:
        Run summary dict (JSON-safe)

    Raises:
        InvalidRunModeError: If run_mode is not "single" or "multi"
        UpstreamFailure: If a store operation fails
    """
    job = ContainerBackupJob(
        config.job_name,
        source_store.get_container(),
        backup_store.get_container(),
        partition_key_field=source_store.partition_key_field,
        id_field=source_store.id_field,
    )
    options = {
        "query": QuerySpec(filter=config.query_filter, parameters=config.query_parameters),
        "page_size": config.page_size,
        "dry_run": config.dry_run,
        "run_mode": config.run_mode,
    }

    log.info(
        f"Starting backup job '{config.job_name}' "
        f"(run_mode={config.run_mode}, dry_run={config.dry_run}, page_size={config.page_size})"
    )
    summary = asyncio.run(job.run(options))
    for line in summary.report_lines():
        log.info(line)

    return summary.model_dump(mode="json")


@op(required_resource_keys={"source_store", "backup_store"})
def backup_container(context: OpExecutionContext, config: BackupRunConfig) -> dict:
    """
    Back up the source container into the backup container.

    Args:
        context: Dagster op execution context
        config: Query, paging and mode settings for the run

    Returns:
        Run summary dict with counters, elapsed time and cost
    """
    return _backup_container(
        source_store=context.resources.source_store,
        backup_store=context.resources.backup_store,
        config=config,
        log=context.log,
    )
