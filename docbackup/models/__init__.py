# =============================================================================
# Data Models Library
# =============================================================================
# Pydantic models and document builders for the backup engine.
# =============================================================================

"""
Data models for the backup engine.

This library provides:
- QuerySpec: Parameterised container queries
- RunOptions / RunMode: Per-run options
- StatsSnapshot / RunSummary: Run results
- Document builders for backup and cleaned copies
- Configuration models
"""

# Query models
from .query import QuerySpec

# Run models
from .run import (
    DEFAULT_PAGE_SIZE,
    RunMode,
    RunOptions,
    RunSummary,
    StatsSnapshot,
    resolve_run_options,
)

# Derived documents
from .documents import (
    BACKUP_DATE_FIELD,
    ID_FIELD,
    JOB_NAME_FIELD,
    ORIGINAL_ID_FIELD,
    Document,
    DocumentCleaner,
    DocumentTester,
    build_backup_document,
    build_cleaned_document,
)

# Configuration models
from .config import (
    BackupSettings,
    ContainerSettings,
)

__all__ = [
    # Query models
    "QuerySpec",
    # Run models
    "DEFAULT_PAGE_SIZE",
    "RunMode",
    "RunOptions",
    "RunSummary",
    "StatsSnapshot",
    "resolve_run_options",
    # Derived documents
    "BACKUP_DATE_FIELD",
    "ID_FIELD",
    "JOB_NAME_FIELD",
    "ORIGINAL_ID_FIELD",
    "Document",
    "DocumentCleaner",
    "DocumentTester",
    "build_backup_document",
    "build_cleaned_document",
    # Configuration models
    "BackupSettings",
    "ContainerSettings",
]
