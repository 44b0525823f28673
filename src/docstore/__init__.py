"""Пакет интеграции с удалённым хранилищем документов."""

from .api_client import DocumentStoreClient, DocumentStoreError, RemoteDocumentStore

__all__ = [
    "DocumentStoreClient",
    "DocumentStoreError",
    "RemoteDocumentStore",
]
