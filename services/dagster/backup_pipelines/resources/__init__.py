"""Dagster Resources - Document Store Connections."""

from .document_store_resource import DocumentStoreResource

__all__ = [
    "DocumentStoreResource",
]
