# =============================================================================
# Cursor Source
# =============================================================================
# Wraps a query against the source container and hands out pages on demand.
# =============================================================================

"""Page-at-a-time access to a source container query."""

from dataclasses import dataclass, field
from typing import List, Optional

from ..errors import CursorExhaustedError, NotInitializedError
from ..models import Document, QuerySpec
from ..store import DocumentContainer, DocumentCursor

__all__ = ["Page", "CursorSource"]


@dataclass(frozen=True)
class Page:
    """One batch of documents returned by a single cursor advance."""

    documents: List[Document] = field(default_factory=list)
    has_more: bool = False
    cost: float = 0.0


class CursorSource:
    """
    Owns the cursor of one run.

    ``open`` creates the cursor; ``next`` advances it. Once a page reports
    ``has_more=False`` the cursor is terminal. Store failures are not retried
    here; they propagate to the caller unchanged.
    """

    def __init__(self, container: DocumentContainer):
        self.container = container
        self._cursor: Optional[DocumentCursor] = None
        self._exhausted = False

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def open(self, query: QuerySpec, page_size: int) -> None:
        """Create a cursor for ``query`` fetching ``page_size`` documents per page."""
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self._cursor = self.container.query(query, page_size)
        self._exhausted = False

    async def next(self) -> Page:
        """
        Fetch the next page.

        Raises:
            NotInitializedError: If called before open()
            CursorExhaustedError: If the previous page was the last one
            UpstreamFailure: If the store rejects the request
        """
        if self._cursor is None:
            raise NotInitializedError("Query has not been made yet. Call open() first.")
        if self._exhausted:
            raise CursorExhaustedError("Cursor has no more pages")

        result = await self._cursor.fetch_next()
        self._exhausted = not result.has_more
        return Page(
            documents=list(result.documents),
            has_more=result.has_more,
            cost=float(result.request_charge),
        )
