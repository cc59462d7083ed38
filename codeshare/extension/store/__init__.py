from codeshare.extension.store.base import Document, DocumentStore, FieldFilter, StoreTransaction
from codeshare.extension.store.memory import MemoryDocumentStore


def build_store(settings) -> DocumentStore:
    """按 settings.store.backend 构建存储实例"""
    backend = (settings.store.backend or "memory").lower()
    if backend == "firestore":
        from codeshare.extension.google_tools.firestore import FirestoreDocumentStore
        return FirestoreDocumentStore()
    if backend == "memory":
        return MemoryDocumentStore()
    raise ValueError(f"未知的存储后端: {backend}")


__all__ = [
    "Document",
    "DocumentStore",
    "FieldFilter",
    "MemoryDocumentStore",
    "StoreTransaction",
    "build_store",
]
