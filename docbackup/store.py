# =============================================================================
# Document Store Capability
# =============================================================================
# Narrow interface the engine consumes from a document database. Concrete
# adapters (see mongo_store) and in-memory test doubles implement it.
# =============================================================================

"""Capability interface for document containers and their cursors."""

from dataclasses import dataclass, field
from typing import Any, List, Protocol, runtime_checkable

from .models import Document, QuerySpec

__all__ = [
    "FetchResult",
    "WriteResult",
    "ScalarResult",
    "DocumentCursor",
    "DocumentContainer",
]


@dataclass(frozen=True)
class FetchResult:
    """One page returned by a cursor advance."""

    documents: List[Document] = field(default_factory=list)
    has_more: bool = False
    request_charge: float = 0.0


@dataclass(frozen=True)
class WriteResult:
    """Outcome of an upsert or replace."""

    request_charge: float = 0.0


@dataclass(frozen=True)
class ScalarResult:
    """Outcome of a point query returning a single value."""

    value: Any = None
    request_charge: float = 0.0


@runtime_checkable
class DocumentCursor(Protocol):
    """Server-side continuation over a query's result set."""

    async def fetch_next(self) -> FetchResult:
        """
        Fetch the next page.

        Raises:
            UpstreamFailure: If the store rejects the request
        """
        ...


@runtime_checkable
class DocumentContainer(Protocol):
    """A logical collection of documents within a document store."""

    def describe(self) -> str:
        """Human-readable location of the container, for logging."""
        ...

    def query(self, spec: QuerySpec, page_size: int) -> DocumentCursor:
        """Create a cursor over the documents matching ``spec``."""
        ...

    async def upsert(self, document: Document) -> WriteResult:
        """Insert or overwrite a document by identifier and partition key."""
        ...

    async def replace(
        self, document_id: Any, partition_key_value: Any, document: Document
    ) -> WriteResult:
        """Replace an existing document located by identifier and partition key."""
        ...

    async def point_query(self, spec: QuerySpec) -> ScalarResult:
        """Run a query that yields a single scalar (a document count)."""
        ...
