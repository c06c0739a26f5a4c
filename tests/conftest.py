"""
Shared pytest fixtures for the backup engine tests.

Provides an in-memory DocumentContainer that records every store call,
reports configurable request charges and can be told to fail.
"""

import asyncio
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pytest

from docbackup.errors import UpstreamFailure
from docbackup.models import QuerySpec
from docbackup.store import FetchResult, ScalarResult, WriteResult


# =============================================================================
# In-memory container
# =============================================================================

class FakeCursor:
    """Serves a snapshot of the container's matching documents page by page."""

    def __init__(self, container: "FakeContainer", documents: List[Dict], page_size: int):
        self._container = container
        self._documents = documents
        self._page_size = page_size
        self._offset = 0

    async def fetch_next(self) -> FetchResult:
        self._container.calls.append(("fetch", self._offset))
        await asyncio.sleep(0)
        if self._container.fail_fetch:
            raise UpstreamFailure("query", "request rate is large")
        page = self._documents[self._offset:self._offset + self._page_size]
        self._offset += len(page)
        return FetchResult(
            documents=[dict(doc) for doc in page],
            has_more=self._offset < len(self._documents),
            request_charge=self._container.query_charge,
        )


class FakeContainer:
    """
    DocumentContainer keeping documents in a dict keyed by (id, pk).

    Attributes:
        calls: Every store call in order, as (operation, detail) tuples
        events: Start/end markers of writes, for ordering assertions
        max_in_flight: Highest number of concurrent upserts observed
        upsert_delays: Extra event loop turns an upsert of a given id takes
    """

    def __init__(
        self,
        name: str,
        documents: Iterable[Dict] = (),
        *,
        partition_key_field: str = "pk",
        query_charge: float = 0.0,
        write_charge: float = 0.0,
        count_charge: float = 0.0,
        fail_upsert_ids: Iterable[str] = (),
        upsert_delays: Optional[Dict[str, int]] = None,
        fail_replace_ids: Iterable[str] = (),
        fail_fetch: bool = False,
        drop_writes: bool = False,
    ):
        self.name = name
        self.partition_key_field = partition_key_field
        self.documents: Dict[Tuple[Any, Any], Dict] = {}
        for doc in documents:
            self.documents[self._key(doc)] = dict(doc)
        self.query_charge = query_charge
        self.write_charge = write_charge
        self.count_charge = count_charge
        self.fail_upsert_ids = set(fail_upsert_ids)
        self.upsert_delays = dict(upsert_delays or {})
        self.fail_replace_ids = set(fail_replace_ids)
        self.fail_fetch = fail_fetch
        self.drop_writes = drop_writes
        self.calls: List[Tuple[str, Any]] = []
        self.events: List[Tuple[str, Any]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def _key(self, doc: Dict) -> Tuple[Any, Any]:
        return (doc.get("id"), doc.get(self.partition_key_field))

    def _matches(self, doc: Dict, criteria: Dict) -> bool:
        return all(doc.get(field) == value for field, value in criteria.items())

    def describe(self) -> str:
        return f"memory -> {self.name}"

    def ids(self) -> List[Any]:
        return [doc.get("id") for doc in self.documents.values()]

    def call_count(self, operation: str) -> int:
        return sum(1 for op, _ in self.calls if op == operation)

    def query(self, spec: QuerySpec, page_size: int) -> FakeCursor:
        criteria = spec.resolve()
        snapshot = [dict(doc) for doc in self.documents.values() if self._matches(doc, criteria)]
        return FakeCursor(self, snapshot, page_size)

    async def upsert(self, document: Dict) -> WriteResult:
        doc_id = document.get("id")
        self.calls.append(("upsert", doc_id))
        self.events.append(("upsert_start", doc_id))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            for _ in range(1 + self.upsert_delays.get(doc_id, 0)):
                await asyncio.sleep(0)
            if doc_id in self.fail_upsert_ids:
                raise UpstreamFailure("upsert", f"document '{doc_id}' rejected")
            if not self.drop_writes:
                self.documents[self._key(document)] = dict(document)
        finally:
            self.in_flight -= 1
            self.events.append(("upsert_end", doc_id))
        return WriteResult(request_charge=self.write_charge)

    async def replace(self, document_id: Any, partition_key_value: Any, document: Dict) -> WriteResult:
        self.calls.append(("replace", document_id))
        await asyncio.sleep(0)
        if document_id in self.fail_replace_ids:
            raise UpstreamFailure("replace", f"document '{document_id}' rejected")
        key = (document_id, partition_key_value)
        if key not in self.documents:
            raise UpstreamFailure("replace", f"document '{document_id}' not found")
        self.documents[key] = dict(document)
        return WriteResult(request_charge=self.write_charge)

    async def point_query(self, spec: QuerySpec) -> ScalarResult:
        criteria = spec.resolve()
        self.calls.append(("point_query", criteria))
        await asyncio.sleep(0)
        count = sum(1 for doc in self.documents.values() if self._matches(doc, criteria))
        return ScalarResult(value=count, request_charge=self.count_charge)


# =============================================================================
# Fixtures
# =============================================================================

def make_documents(count: int, pk: str = "tenant-a") -> List[Dict]:
    """Source documents d1..dN sharing one partition key."""
    return [
        {"id": f"d{i}", "pk": pk, "name": f"Document {i}", "status": "dirty"}
        for i in range(1, count + 1)
    ]


@pytest.fixture
def source_documents() -> List[Dict]:
    """Five source documents, d1..d5."""
    return make_documents(5)


@pytest.fixture
def make_container():
    """Factory for FakeContainer instances."""

    def _make(name: str = "container", documents: Optional[Iterable[Dict]] = None, **kwargs) -> FakeContainer:
        return FakeContainer(name, documents or (), **kwargs)

    return _make


@pytest.fixture
def source(make_container, source_documents) -> FakeContainer:
    return make_container("source", source_documents)


@pytest.fixture
def destination(make_container) -> FakeContainer:
    return make_container("backup")


@pytest.fixture
def document_factory():
    """Factory building source documents d1..dN."""
    return make_documents
