# =============================================================================
# Mongo Store - MongoDB-API container adapter
# =============================================================================
# Implements the DocumentContainer capability on top of pymongo. Works with
# MongoDB and with Azure Cosmos DB for MongoDB, whose request charges can be
# read back through the getLastRequestStatistics command.
# =============================================================================

"""pymongo-backed implementation of the document store capability."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, Optional, TypeVar

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.cursor import Cursor
from pymongo.errors import OperationFailure, PyMongoError

from .errors import UpstreamFailure
from .models import ContainerSettings, Document, ID_FIELD, QuerySpec
from .store import FetchResult, ScalarResult, WriteResult

__all__ = ["MongoContainer", "MongoCursor"]

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MongoCursor:
    """
    Page-at-a-time reader over a pymongo cursor.

    pymongo streams documents rather than pages, so one document is read ahead
    after each page to decide whether another page exists. A result set of N
    documents therefore takes exactly ceil(N / page_size) fetches.
    """

    def __init__(self, container: "MongoContainer", cursor: Cursor, page_size: int):
        self._container = container
        self._cursor = cursor
        self._page_size = page_size
        self._head: Optional[Document] = None

    async def fetch_next(self) -> FetchResult:
        return await self._container._run("query", self._read_page)

    def _read_page(self) -> FetchResult:
        documents = []
        if self._head is not None:
            documents.append(self._head)
            self._head = None

        while len(documents) < self._page_size:
            raw = next(self._cursor, None)
            if raw is None:
                break
            documents.append(MongoContainer._strip_object_id(raw))

        if len(documents) == self._page_size:
            raw = next(self._cursor, None)
            if raw is not None:
                self._head = MongoContainer._strip_object_id(raw)

        return FetchResult(
            documents=documents,
            has_more=self._head is not None,
            request_charge=self._container._request_charge(),
        )


class MongoContainer:
    """
    DocumentContainer over a single pymongo collection.

    Blocking pymongo calls run in worker threads via asyncio.to_thread, so
    several documents can be in flight on one event loop while every caller
    update of shared state stays on the loop thread.

    Documents are located by (id_field, partition_key_field). MongoDB's own
    ``_id`` is stripped from documents read and written so copies between
    containers never collide on it.

    Attributes:
        collection: pymongo collection backing the container
        partition_key_field: Partition key field name
        id_field: Identifier field name (default: "id")
        request_charge: Read Cosmos DB request charges after each operation

    Example:
        >>> container = MongoContainer.from_settings(settings.source, partition_key_field="pk")
        >>> cursor = container.query(QuerySpec(), page_size=100)
        >>> page = await cursor.fetch_next()
    """

    def __init__(
        self,
        collection: Collection,
        *,
        partition_key_field: str,
        id_field: str = ID_FIELD,
        request_charge: bool = False,
    ):
        self.collection = collection
        self.partition_key_field = partition_key_field
        self.id_field = id_field
        self.request_charge = request_charge

    @classmethod
    def from_settings(
        cls,
        settings: ContainerSettings,
        *,
        partition_key_field: str,
        id_field: str = ID_FIELD,
        request_charge: bool = False,
        server_selection_timeout_ms: int = 10000,
    ) -> "MongoContainer":
        """Open a client for ``settings`` and wrap its collection."""
        client = MongoClient(
            settings.connection_string,
            serverSelectionTimeoutMS=server_selection_timeout_ms,
        )
        collection = client[settings.database][settings.container]
        return cls(
            collection,
            partition_key_field=partition_key_field,
            id_field=id_field,
            request_charge=request_charge,
        )

    @staticmethod
    def _strip_object_id(doc: Dict) -> Dict:
        stripped = dict(doc)
        stripped.pop("_id", None)
        return stripped

    def describe(self) -> str:
        return f"{self.collection.database.name} -> {self.collection.name}"

    # ------------------------------------------------------------------
    # Capability operations
    # ------------------------------------------------------------------

    def query(self, spec: QuerySpec, page_size: int) -> MongoCursor:
        """
        Create a cursor over the documents matching ``spec``.

        No round trip happens until the first fetch.
        """
        cursor = self.collection.find(spec.resolve(), spec.projection).batch_size(page_size)
        return MongoCursor(self, cursor, page_size)

    async def upsert(self, document: Document) -> WriteResult:
        """
        Insert or overwrite ``document`` by identifier and partition key.

        Raises:
            UpstreamFailure: If the document has no identifier or the write fails
        """
        document_id = document.get(self.id_field)
        if document_id is None:
            raise UpstreamFailure(
                "upsert", f"document has no '{self.id_field}' field to locate its backup by"
            )

        def _upsert() -> WriteResult:
            self.collection.replace_one(
                self._locator(document_id, document.get(self.partition_key_field)),
                self._strip_object_id(document),
                upsert=True,
            )
            return WriteResult(request_charge=self._request_charge())

        return await self._run("upsert", _upsert)

    async def replace(
        self, document_id: Any, partition_key_value: Any, document: Document
    ) -> WriteResult:
        """
        Replace the document at (document_id, partition_key_value).

        Raises:
            UpstreamFailure: If no such document exists or the write fails
        """

        def _replace() -> WriteResult:
            result = self.collection.replace_one(
                self._locator(document_id, partition_key_value),
                self._strip_object_id(document),
            )
            charge = self._request_charge()
            if result.matched_count == 0:
                raise UpstreamFailure(
                    "replace",
                    f"document with id '{document_id}' and partitionKey "
                    f"'{partition_key_value}' not found",
                )
            return WriteResult(request_charge=charge)

        return await self._run("replace", _replace)

    async def point_query(self, spec: QuerySpec) -> ScalarResult:
        """Count the documents matching ``spec``."""

        def _count() -> ScalarResult:
            count = self.collection.count_documents(spec.resolve())
            return ScalarResult(value=count, request_charge=self._request_charge())

        return await self._run("point_query", _count)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _locator(self, document_id: Any, partition_key_value: Any) -> Dict[str, Any]:
        return {self.id_field: document_id, self.partition_key_field: partition_key_value}

    def _request_charge(self) -> float:
        """
        Request charge of the last operation, 0.0 when charges are disabled.

        Only meaningful against Cosmos DB for MongoDB. Plain MongoDB rejects
        the command, which is logged once and then treated as zero cost.
        """
        if not self.request_charge:
            return 0.0
        try:
            stats = self.collection.database.command({"getLastRequestStatistics": 1})
        except OperationFailure as exc:
            logger.warning(f"Request charge unavailable, disabling collection: {exc}")
            self.request_charge = False
            return 0.0
        return float(stats.get("RequestCharge", 0.0))

    async def _run(self, operation: str, func: Callable[[], T]) -> T:
        try:
            return await asyncio.to_thread(func)
        except PyMongoError as exc:
            raise UpstreamFailure(operation, str(exc), exc) from exc
