# =============================================================================
# Job Controller
# =============================================================================
# Top-level orchestration of backup and cleaning runs: resolves options,
# starts the page scheduler, times the run and reports a summary.
# =============================================================================

"""Backup and cleaning job orchestration."""

import logging
import time
from typing import Any, Mapping, Optional, Union

from ..errors import RunInProgressError
from ..models import (
    ID_FIELD,
    DocumentCleaner,
    DocumentTester,
    RunOptions,
    RunSummary,
    resolve_run_options,
)
from ..store import DocumentContainer
from .cursor import CursorSource
from .pipeline import DocumentPipeline
from .scheduler import PageScheduler
from .stats import RunStats

__all__ = ["ContainerBackupJob"]

logger = logging.getLogger(__name__)

OptionsInput = Union[RunOptions, Mapping[str, Any], None]


class ContainerBackupJob:
    """
    Backs up documents matching a query from one container to another.

    One instance runs at most one job at a time; its counters are reset at
    the start of every run.

    Attributes:
        name: Job name, tags every backup and cleaned document
        source: Container the documents are read from
        destination: Container the backups are written to
        partition_key_field: Default partition key field name (default: "pk")
        id_field: Identifier field name (default: "id")
        stats: Counters of the current or last run
        last_summary: Summary of the last finished or failed run

    Example:
        >>> job = ContainerBackupJob("ContainerBackup", source, destination)
        >>> summary = await job.run({"dry_run": False, "run_mode": "multi"})
    """

    def __init__(
        self,
        name: str,
        source: DocumentContainer,
        destination: DocumentContainer,
        *,
        partition_key_field: str = "pk",
        id_field: str = ID_FIELD,
    ):
        self.name = name
        self.source = source
        self.destination = destination
        self.partition_key_field = partition_key_field
        self.id_field = id_field
        self.stats = RunStats()
        self.last_summary: Optional[RunSummary] = None
        self._active = False
        logger.info(f"ContainerBackupJob '{name}' created")

    @property
    def active(self) -> bool:
        return self._active

    async def run(self, options: OptionsInput = None) -> RunSummary:
        """
        Back up every document matched by the query.

        Raises:
            InvalidRunModeError: Before any store call, for an unknown run mode
            RunInProgressError: If this job is already running
            UpstreamFailure: If a store operation fails (after logging)
        """
        return await self._execute(options, workflow="Backup")

    async def clean(
        self,
        options: OptionsInput,
        cleaner: DocumentCleaner,
        tester: Optional[DocumentTester] = None,
    ) -> RunSummary:
        """
        Back up matching documents, then replace each with its cleaned copy.

        A document is only replaced once its backup is confirmed to exist in
        the destination. When ``tester`` is given, documents it rejects are
        examined but left alone.
        """
        return await self._execute(options, workflow="Data cleaning", cleaner=cleaner, tester=tester)

    async def _execute(
        self,
        options: OptionsInput,
        *,
        workflow: str,
        cleaner: Optional[DocumentCleaner] = None,
        tester: Optional[DocumentTester] = None,
    ) -> RunSummary:
        resolved = resolve_run_options(options)
        if self._active:
            raise RunInProgressError(f"Job '{self.name}' already has an active run")

        self._active = True
        try:
            return await self._perform(resolved, workflow, cleaner, tester)
        finally:
            self._active = False

    async def _perform(
        self,
        options: RunOptions,
        workflow: str,
        cleaner: Optional[DocumentCleaner],
        tester: Optional[DocumentTester],
    ) -> RunSummary:
        logger.info("Resetting state")
        self.stats.reset()

        pipeline = DocumentPipeline(
            job_name=self.name,
            source=self.source,
            destination=self.destination,
            stats=self.stats,
            dry_run=options.dry_run,
            partition_key_field=options.partition_key_field or self.partition_key_field,
            id_field=self.id_field,
            cleaner=cleaner,
            tester=tester,
        )
        scheduler = PageScheduler(CursorSource(self.source), pipeline, self.stats, options.run_mode)

        self._log_banner(options, workflow)
        start = time.perf_counter()
        try:
            await scheduler.run(options.query, options.page_size)
        except Exception as exc:
            logger.exception(f"{workflow} job '{self.name}' failed: {exc}")
            self._finish(options, start, error=exc)
            raise

        return self._finish(options, start)

    def _finish(
        self,
        options: RunOptions,
        start: float,
        error: Optional[BaseException] = None,
    ) -> RunSummary:
        summary = RunSummary(
            job_name=self.name,
            run_mode=options.run_mode,
            dry_run=options.dry_run,
            elapsed_ms=(time.perf_counter() - start) * 1000,
            stats=self.stats.snapshot(),
            succeeded=error is None,
            error_message=str(error) if error is not None else None,
        )
        self.last_summary = summary
        for line in summary.report_lines():
            logger.info(line)
        return summary

    def _log_banner(self, options: RunOptions, workflow: str) -> None:
        logger.info("==================================")
        logger.info(f"{workflow} job '{self.name}' is starting. These settings will be used:")
        logger.info(f"FROM database:\t{self.source.describe()}")
        logger.info(f"TO database:\t{self.destination.describe()}")
        logger.info(f"Query: {options.query.describe()}")
        logger.info(f"Page size: {options.page_size}, run mode: {options.run_mode.value}")
        logger.info("--> DRY RUN MODE TRUE <--" if options.dry_run else "--> PRODUCTION MODE <--")
        logger.info("==================================")
