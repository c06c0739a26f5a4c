# =============================================================================
# Derived Document Builders
# =============================================================================
# Builds backup and cleaned copies of source documents. Source documents are
# never mutated; every derived document is a fresh shallow copy.
# =============================================================================

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

__all__ = [
    "Document",
    "DocumentCleaner",
    "DocumentTester",
    "ID_FIELD",
    "ORIGINAL_ID_FIELD",
    "BACKUP_DATE_FIELD",
    "JOB_NAME_FIELD",
    "build_backup_document",
    "build_cleaned_document",
]

Document = Dict[str, Any]
DocumentCleaner = Callable[[Document], Document]
DocumentTester = Callable[[Document], bool]

ID_FIELD = "id"
ORIGINAL_ID_FIELD = "idOriginal"
BACKUP_DATE_FIELD = "backupDate"
JOB_NAME_FIELD = "backupJobName"


def build_backup_document(
    document: Document,
    job_name: str,
    *,
    id_field: str = ID_FIELD,
    now: Optional[datetime] = None,
) -> Document:
    """
    Build the backup copy of a source document.

    Adds the original identifier, an ISO-8601 backup timestamp and the job
    name. The identifier and partition key are kept, so re-running a job
    overwrites the previous backup of the same document.

    Args:
        document: Source document (left untouched)
        job_name: Name of the backup job
        id_field: Identifier field of the source document
        now: Timestamp override, defaults to the current UTC time

    Returns:
        New backup document
    """
    timestamp = (now or datetime.now(timezone.utc)).isoformat()
    return {
        **document,
        ORIGINAL_ID_FIELD: document.get(id_field),
        BACKUP_DATE_FIELD: timestamp,
        JOB_NAME_FIELD: job_name,
    }


def build_cleaned_document(
    document: Document,
    cleaner: DocumentCleaner,
    job_name: str,
) -> Document:
    """
    Run the caller's cleaner on a copy of the document and tag the result.

    The cleaner receives a shallow copy, so cleaners that edit top-level keys
    in place cannot touch the source document.
    """
    cleaned = cleaner(dict(document))
    if not isinstance(cleaned, dict):
        raise TypeError(
            f"Document cleaner must return a dict, got {type(cleaned).__name__}"
        )
    return {**cleaned, JOB_NAME_FIELD: job_name}
