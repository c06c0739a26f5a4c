# =============================================================================
# Document Store Resource - Source and backup containers
# =============================================================================
# Dagster resource wrapping one MongoDB-API container as a DocumentContainer.
# =============================================================================

"""Dagster resource exposing a document container to backup ops."""

from __future__ import annotations

from functools import cached_property

from dagster import ConfigurableResource
from pydantic import Field
from pymongo import MongoClient

from docbackup.mongo_store import MongoContainer

__all__ = ["DocumentStoreResource"]


class DocumentStoreResource(ConfigurableResource):
    """
    Dagster resource for one document container.

    Configure one instance for the source container and one for the backup
    container. The pymongo client is created lazily and reused by every
    container handed out.

    Attributes:
        connection_string: MongoDB-API connection URI
        database: Database name
        container: Container (collection) name
        partition_key_field: Partition key field name (default: "pk")
        id_field: Identifier field name (default: "id")
        request_charge: Read Cosmos DB request charges after each operation
        server_selection_timeout_ms: Client server selection timeout
    """

    connection_string: str = Field(..., description="MongoDB-API connection URI")
    database: str = Field(..., description="Database name")
    container: str = Field(..., description="Container (collection) name")
    partition_key_field: str = Field("pk", description="Partition key field name")
    id_field: str = Field("id", description="Identifier field name")
    request_charge: bool = Field(False, description="Collect Cosmos DB request charges")
    server_selection_timeout_ms: int = Field(10000, description="Server selection timeout (ms)")

    @cached_property
    def _client(self) -> MongoClient:
        return MongoClient(
            self.connection_string,
            serverSelectionTimeoutMS=self.server_selection_timeout_ms,
        )

    def get_container(self) -> MongoContainer:
        """Return the configured container as a DocumentContainer."""
        return MongoContainer(
            self._client[self.database][self.container],
            partition_key_field=self.partition_key_field,
            id_field=self.id_field,
            request_charge=self.request_charge,
        )
