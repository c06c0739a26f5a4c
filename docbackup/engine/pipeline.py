# =============================================================================
# Document Pipeline
# =============================================================================
# Per-document stages: stage a backup copy, optionally verify it exists in the
# destination, optionally replace the original with a cleaned copy.
# =============================================================================

"""Operations applied to each source document of a run."""

import logging
from typing import Any, Optional

from ..errors import UpstreamFailure
from ..models import (
    ID_FIELD,
    Document,
    DocumentCleaner,
    DocumentTester,
    QuerySpec,
    build_backup_document,
    build_cleaned_document,
)
from ..store import DocumentContainer, WriteResult
from .stats import RunStats

__all__ = ["DocumentPipeline"]

logger = logging.getLogger(__name__)


class DocumentPipeline:
    """
    Stage sequence run once per source document.

    Backup workflow (no cleaner):
    1. Build the backup document
    2. Upsert it into the destination, unless dry run

    Cleaning workflow (cleaner given) additionally:
    0. Skip documents the tester rejects (examined only)
    3. Check the backup exists in the destination
    4. If it does, replace the source document with the cleaned copy

    In dry run every store call is skipped and logged instead; only the
    "examined" counter moves. A store failure aborts the document and
    propagates; counters already recorded for it stay.

    Attributes:
        job_name: Tags every derived document
        source: Container the documents come from (replaced when cleaning)
        destination: Container receiving backups
        stats: Accumulator of the active run
        dry_run: Skip all writes and checks when true
        partition_key_field: Partition key field name
        id_field: Identifier field name
        cleaner: Transformation producing the cleaned document
        tester: Predicate selecting documents to clean
    """

    def __init__(
        self,
        *,
        job_name: str,
        source: DocumentContainer,
        destination: DocumentContainer,
        stats: RunStats,
        dry_run: bool,
        partition_key_field: str,
        id_field: str = ID_FIELD,
        cleaner: Optional[DocumentCleaner] = None,
        tester: Optional[DocumentTester] = None,
    ):
        if tester is not None and cleaner is None:
            raise ValueError("A document tester requires a document cleaner")
        self.job_name = job_name
        self.source = source
        self.destination = destination
        self.stats = stats
        self.dry_run = dry_run
        self.partition_key_field = partition_key_field
        self.id_field = id_field
        self.cleaner = cleaner
        self.tester = tester

    @property
    def cleaning(self) -> bool:
        return self.cleaner is not None

    def _describe(self, document: Document) -> str:
        return (
            f"id '{document.get(self.id_field)}' and partitionKey "
            f"'{document.get(self.partition_key_field)}'"
        )

    async def process(self, document: Document, page_number: int, ordinal: int) -> None:
        """Run every stage for one source document."""
        logger.info(
            f"Handling document #-{ordinal} in page #-{page_number} with {self._describe(document)}"
        )

        if self.tester is not None and not self.tester(document):
            logger.info(f"Document with {self._describe(document)} does not need cleaning, skipping")
            return

        try:
            await self._run_stages(document)
        except UpstreamFailure as exc:
            logger.error(
                f"Document with {self._describe(document)} failed during {exc.operation}",
                extra={
                    "payload": {
                        "id": document.get(self.id_field),
                        "partitionKey": document.get(self.partition_key_field),
                        "page": page_number,
                        "ordinal": ordinal,
                        "operation": exc.operation,
                        "error": str(exc),
                    }
                },
            )
            raise

    async def _run_stages(self, document: Document) -> None:
        await self.backup(document)

        if not self.cleaning:
            return

        if await self.verify_backup(document):
            await self.replace_with_cleaned(document)

    async def backup(self, document: Document) -> Optional[Document]:
        """
        Stage the backup copy of ``document`` in the destination.

        Returns:
            The written backup document, or None in dry run
        """
        backup_document = build_backup_document(document, self.job_name, id_field=self.id_field)
        logger.info(f"Backup document created with {self._describe(backup_document)}. Uploading...")

        if self.dry_run:
            return None

        result = await self.destination.upsert(backup_document)
        self.stats.add_cost(result.request_charge)
        self.stats.record_backup()
        logger.info(f"Backup document with {self._describe(backup_document)} uploaded to backup database")
        return backup_document

    async def verify_backup(self, document: Document) -> bool:
        """
        Check that a backup of ``document`` exists in the destination.

        The check has no side effect; it only gates the replacement. In dry
        run it is skipped and treated as passed so the cleaning intent can be
        logged.
        """
        if self.dry_run:
            logger.info(f"Dry run: skipping backup existence check for {self._describe(document)}")
            return True

        spec = QuerySpec(
            filter={self.id_field: "@id", self.partition_key_field: "@pk"},
            parameters={
                "@id": document.get(self.id_field),
                "@pk": document.get(self.partition_key_field),
            },
        )
        result = await self.destination.point_query(spec)
        self.stats.add_cost(result.request_charge)

        backup_exists = _as_count(result.value) >= 1
        self.stats.record_verification(backup_exists)
        if backup_exists:
            logger.info("Backup document exists")
        else:
            logger.warning(f"Backup document does not exist for {self._describe(document)}")
        return backup_exists

    async def replace_with_cleaned(self, document: Document) -> Optional[WriteResult]:
        """
        Replace ``document`` at its original location with its cleaned copy.

        Returns:
            The store's write result, or None in dry run
        """
        cleaned_document = build_cleaned_document(document, self.cleaner, self.job_name)
        document_id = document.get(self.id_field)
        partition_key_value = document.get(self.partition_key_field)

        if self.dry_run:
            logger.info(f"Dry run: would replace document with {self._describe(document)}")
            return None

        logger.info(f"Replacing document with id '{document_id}'")
        result = await self.source.replace(document_id, partition_key_value, cleaned_document)
        self.stats.add_cost(result.request_charge)
        self.stats.record_update()
        return result


def _as_count(value: Any) -> int:
    if value is None:
        return 0
    return int(value)
