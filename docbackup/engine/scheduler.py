# =============================================================================
# Page Scheduler
# =============================================================================
# Drives the cursor page by page and dispatches every document of a page to
# the document pipeline, sequentially (single) or all at once (multi).
# =============================================================================

"""Page-by-page dispatch of documents to the pipeline."""

import asyncio
import logging
from enum import Enum
from typing import List

from ..models import Document, QuerySpec, RunMode, StatsSnapshot
from .cursor import CursorSource
from .pipeline import DocumentPipeline
from .stats import RunStats

__all__ = ["SchedulerState", "PageScheduler"]

logger = logging.getLogger(__name__)


class SchedulerState(str, Enum):
    """States of one scheduler run. DONE and FAILED are terminal."""

    INIT = "init"
    FETCHING = "fetching"
    DISPATCHING = "dispatching"
    DONE = "done"
    FAILED = "failed"


class PageScheduler:
    """
    Runs the fetch/dispatch loop of one run.

    Single mode awaits each document's pipeline before starting the next;
    the first failure aborts the run. Multi mode starts the pipelines of all
    documents of a page at once and waits until every one has settled. The
    page is a hard barrier: nothing from the next page starts before then.
    If any of them failed, the first failure to happen is raised once the
    whole page settled, so no pipeline outlives a failed run. Writes that
    succeeded are kept.

    No cap on in-flight documents exists besides the page size.
    """

    def __init__(
        self,
        cursor_source: CursorSource,
        pipeline: DocumentPipeline,
        stats: RunStats,
        run_mode: RunMode,
    ):
        self.cursor_source = cursor_source
        self.pipeline = pipeline
        self.stats = stats
        self.run_mode = RunMode.coerce(run_mode)
        self.state = SchedulerState.INIT

    async def run(self, query: QuerySpec, page_size: int) -> StatsSnapshot:
        """
        Process every document matched by ``query``.

        Returns:
            Final counters of the run

        Raises:
            UpstreamFailure: If a page fetch or a document pipeline fails
        """
        logger.info(f"Performing {self.run_mode.value} mode run")
        self.state = SchedulerState.INIT
        try:
            self.cursor_source.open(query, page_size)
            while True:
                self.state = SchedulerState.FETCHING
                page_number = self.stats.record_page()
                logger.info(f"Fetching page {page_number}...")
                page = await self.cursor_source.next()
                self.stats.add_cost(page.cost)

                self.state = SchedulerState.DISPATCHING
                if self.run_mode is RunMode.SINGLE:
                    await self._dispatch_single(page.documents, page_number)
                else:
                    await self._dispatch_multi(page.documents, page_number)
                logger.info(f"Done with page {page_number}")

                if not page.has_more:
                    break
        except BaseException:
            self.state = SchedulerState.FAILED
            raise

        self.state = SchedulerState.DONE
        return self.stats.snapshot()

    async def _dispatch_single(self, documents: List[Document], page_number: int) -> None:
        for document in documents:
            ordinal = self.stats.record_document()
            await self.pipeline.process(document, page_number, ordinal)

    async def _dispatch_multi(self, documents: List[Document], page_number: int) -> None:
        tasks = [
            asyncio.ensure_future(
                self.pipeline.process(document, page_number, self.stats.record_document())
            )
            for document in documents
        ]

        # Completion order
        errors: List[Exception] = []
        try:
            for finished in asyncio.as_completed(tasks):
                try:
                    await finished
                except Exception as exc:
                    errors.append(exc)
        finally:
            for task in tasks:
                task.cancel()

        if errors:
            logger.error(
                f"{len(errors)} of {len(documents)} documents failed in page {page_number}"
            )
            raise errors[0]
