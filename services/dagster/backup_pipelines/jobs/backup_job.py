"""Container backup job (op-based)."""

from dagster import job

from ..ops import backup_container


@job(
    name="container_backup_job",
    description="Copies documents matching a query from the source container to the backup container",
)
def container_backup_job():
    """
    Container backup job.

    Query, page size, run mode and dry run flag come from the op's run config.
    Dry run is on unless the run config turns it off.
    """
    backup_container()
