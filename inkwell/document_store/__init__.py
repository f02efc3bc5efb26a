from inkwell.document_store.base import DocumentStore
from inkwell.document_store.local import LocalDocumentStore

__all__ = ["DocumentStore", "LocalDocumentStore"]
