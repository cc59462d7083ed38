# -*- coding: utf-8 -*-
"""
# @Time    : 2026/10/19
# @Author  : Pedro
# @File    : memory.py
# @Software: PyCharm

进程内文档存储（本地开发 / 测试）
------------------------------------------------------
✅ 与 Firestore 相同的语义（自增、批量删除、事务）
✅ 单锁串行化事务，写入在提交时一次性生效
✅ available=False 时模拟后端不可用
"""
import copy
import threading
import uuid
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

from codeshare.core.exception import NotFound, StoreUnavailable
from codeshare.extension.store.base import Document, DocumentStore, FieldFilter, StoreTransaction

T = TypeVar("T")


def _new_key() -> str:
    return uuid.uuid4().hex[:20]


class MemoryTransaction(StoreTransaction):

    def __init__(self, store: "MemoryDocumentStore"):
        self._store = store
        self._writes: List[Tuple[str, str, str, Any, Any]] = []

    def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        if self._writes:
            raise RuntimeError("事务内读取必须在写入之前")
        data = self._store._collection(collection).get(key)
        return copy.deepcopy(data) if data is not None else None

    def set(self, collection: str, key: str, data: Dict[str, Any], merge: bool = False) -> None:
        self._writes.append(("set", collection, key, copy.deepcopy(data), merge))

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        key = _new_key()
        self._writes.append(("set", collection, key, copy.deepcopy(data), False))
        return key

    def increment(self, collection: str, key: str, fields: Dict[str, int], extra: Optional[Dict[str, Any]] = None) -> None:
        self._writes.append(("increment", collection, key, dict(fields), copy.deepcopy(extra or {})))

    def delete(self, collection: str, key: str) -> None:
        self._writes.append(("delete", collection, key, None, None))

    def commit(self) -> None:
        # 先校验，避免部分写入
        for op, collection, key, _, _ in self._writes:
            if op == "increment" and key not in self._store._collection(collection):
                raise NotFound(f"文档不存在: {collection}/{key}")

        for op, collection, key, payload, option in self._writes:
            docs = self._store._collection(collection)
            if op == "set":
                if option and key in docs:
                    docs[key].update(payload)
                else:
                    docs[key] = payload
            elif op == "increment":
                self._store._apply_increment(docs[key], payload, option)
            elif op == "delete":
                docs.pop(key, None)


class MemoryDocumentStore(DocumentStore):
    name = "memory"

    def __init__(self):
        self._data: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._lock = threading.RLock()
        self.available = True

    # =====================================================
    # 🔧 内部工具
    # =====================================================
    def _collection(self, collection: str) -> Dict[str, Dict[str, Any]]:
        return self._data.setdefault(collection, {})

    def _check(self):
        if not self.available:
            raise StoreUnavailable()

    @staticmethod
    def _apply_increment(doc: Dict[str, Any], fields: Dict[str, int], extra: Dict[str, Any]):
        for name, amount in fields.items():
            doc[name] = (doc.get(name) or 0) + amount
        doc.update(extra)

    # =====================================================
    # ✅ 基本读写
    # =====================================================
    async def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        self._check()
        with self._lock:
            data = self._collection(collection).get(key)
            return copy.deepcopy(data) if data is not None else None

    async def create(self, collection: str, key: str, data: Dict[str, Any]) -> bool:
        self._check()
        with self._lock:
            docs = self._collection(collection)
            if key in docs:
                return False
            docs[key] = copy.deepcopy(data)
            return True

    async def set(self, collection: str, key: str, data: Dict[str, Any], merge: bool = False) -> None:
        self._check()
        with self._lock:
            docs = self._collection(collection)
            if merge and key in docs:
                docs[key].update(copy.deepcopy(data))
            else:
                docs[key] = copy.deepcopy(data)

    async def add(self, collection: str, data: Dict[str, Any]) -> str:
        self._check()
        key = _new_key()
        with self._lock:
            self._collection(collection)[key] = copy.deepcopy(data)
        return key

    async def query(
            self,
            collection: str,
            *filters: FieldFilter,
            order_by: Optional[str] = None,
            descending: bool = False,
            limit: Optional[int] = None,
    ) -> List[Document]:
        self._check()
        with self._lock:
            docs = [
                Document(key=key, data=copy.deepcopy(data))
                for key, data in self._collection(collection).items()
                if all(f.matches(data) for f in filters)
            ]
        if order_by:
            docs = [d for d in docs if order_by in d.data]
            docs.sort(key=lambda d: d.data[order_by], reverse=descending)
        if limit is not None:
            docs = docs[:limit]
        return docs

    # =====================================================
    # ✅ 原子操作
    # =====================================================
    async def increment(self, collection: str, key: str, fields: Dict[str, int], extra: Optional[Dict[str, Any]] = None) -> None:
        self._check()
        with self._lock:
            doc = self._collection(collection).get(key)
            if doc is None:
                raise NotFound(f"文档不存在: {collection}/{key}")
            self._apply_increment(doc, fields, copy.deepcopy(extra or {}))

    async def delete(self, collection: str, key: str) -> None:
        self._check()
        with self._lock:
            self._collection(collection).pop(key, None)

    async def delete_many(self, collection: str, keys: List[str]) -> int:
        self._check()
        with self._lock:
            docs = self._collection(collection)
            for key in keys:
                docs.pop(key, None)
        return len(keys)

    async def run_transaction(self, fn: Callable[[StoreTransaction], T]) -> T:
        self._check()
        with self._lock:
            tx = MemoryTransaction(self)
            result = fn(tx)
            tx.commit()
            return result
