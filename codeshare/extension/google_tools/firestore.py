# -*- coding: utf-8 -*-
"""
# @Time    : 2026/10/19
# @Author  : Pedro
# @File    : firestore.py
# @Software: PyCharm

Firestore 文档存储实现
------------------------------------------------------
✅ 同步 SDK 调用统一放进 asyncio.to_thread
✅ Increment / transactional / batch 原子能力
✅ google.api_core 异常 → StoreUnavailable / NotFound
"""
import asyncio
from functools import wraps
from typing import Any, Callable, Dict, List, Optional, TypeVar

from firebase_admin import firestore
from google.api_core import exceptions as gexc
from google.cloud.firestore_v1 import FieldFilter as FSFieldFilter
from google.cloud.firestore_v1 import Increment, Query
from loguru import logger

from codeshare.core.exception import APIException, NotFound, StoreUnavailable
from codeshare.extension.google_tools.firebase_admin_service import init_firebase_admin
from codeshare.extension.store.base import Document, DocumentStore, FieldFilter, StoreTransaction

T = TypeVar("T")

# Firestore 单批次最多 500 次写入
BATCH_LIMIT = 500


def _guard(func):
    """把 Firestore / 网络异常转换为业务异常"""
    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except APIException:
            raise
        except gexc.NotFound as e:
            raise NotFound(f"文档不存在: {e.message}")
        except (gexc.GoogleAPICallError, gexc.RetryError) as e:
            logger.warning(f"🔥 Firestore 调用失败 {func.__name__}: {e}")
            raise StoreUnavailable()
    return wrapper


class FirestoreTransaction(StoreTransaction):

    def __init__(self, db, transaction):
        self._db = db
        self._tx = transaction

    def _ref(self, collection: str, key: str):
        return self._db.collection(collection).document(key)

    def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        snap = self._ref(collection, key).get(transaction=self._tx)
        return snap.to_dict() if snap.exists else None

    def set(self, collection: str, key: str, data: Dict[str, Any], merge: bool = False) -> None:
        self._tx.set(self._ref(collection, key), data, merge=merge)

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        ref = self._db.collection(collection).document()
        self._tx.create(ref, data)
        return ref.id

    def increment(self, collection: str, key: str, fields: Dict[str, int], extra: Optional[Dict[str, Any]] = None) -> None:
        payload = {name: Increment(amount) for name, amount in fields.items()}
        payload.update(extra or {})
        self._tx.update(self._ref(collection, key), payload)

    def delete(self, collection: str, key: str) -> None:
        self._tx.delete(self._ref(collection, key))


class FirestoreDocumentStore(DocumentStore):
    name = "firestore"

    def __init__(self, db=None):
        self._db = db

    @property
    def db(self):
        if not self._db:
            self._db = firestore.client(init_firebase_admin())
        return self._db

    def _ref(self, collection: str, key: str):
        return self.db.collection(collection).document(key)

    # =====================================================
    # ✅ 基本读写
    # =====================================================
    @_guard
    async def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        def _do_get():
            snap = self._ref(collection, key).get()
            return snap.to_dict() if snap.exists else None

        return await asyncio.to_thread(_do_get)

    @_guard
    async def create(self, collection: str, key: str, data: Dict[str, Any]) -> bool:
        def _do_create():
            try:
                self._ref(collection, key).create(data)
                return True
            except gexc.AlreadyExists:
                return False

        return await asyncio.to_thread(_do_create)

    @_guard
    async def set(self, collection: str, key: str, data: Dict[str, Any], merge: bool = False) -> None:
        await asyncio.to_thread(lambda: self._ref(collection, key).set(data, merge=merge))

    @_guard
    async def add(self, collection: str, data: Dict[str, Any]) -> str:
        def _do_add():
            _, ref = self.db.collection(collection).add(data)
            return ref.id

        return await asyncio.to_thread(_do_add)

    @_guard
    async def query(
            self,
            collection: str,
            *filters: FieldFilter,
            order_by: Optional[str] = None,
            descending: bool = False,
            limit: Optional[int] = None,
    ) -> List[Document]:
        def _do_query():
            q = self.db.collection(collection)
            for f in filters:
                q = q.where(filter=FSFieldFilter(f.field_path, f.op_string, f.value))
            if order_by:
                direction = Query.DESCENDING if descending else Query.ASCENDING
                q = q.order_by(order_by, direction=direction)
            if limit is not None:
                q = q.limit(limit)
            return [Document(key=snap.id, data=snap.to_dict() or {}) for snap in q.stream()]

        return await asyncio.to_thread(_do_query)

    # =====================================================
    # ✅ 原子操作
    # =====================================================
    @_guard
    async def increment(self, collection: str, key: str, fields: Dict[str, int], extra: Optional[Dict[str, Any]] = None) -> None:
        payload = {name: Increment(amount) for name, amount in fields.items()}
        payload.update(extra or {})
        await asyncio.to_thread(lambda: self._ref(collection, key).update(payload))

    @_guard
    async def delete(self, collection: str, key: str) -> None:
        await asyncio.to_thread(lambda: self._ref(collection, key).delete())

    @_guard
    async def delete_many(self, collection: str, keys: List[str]) -> int:
        def _do_delete():
            for start in range(0, len(keys), BATCH_LIMIT):
                batch = self.db.batch()
                for key in keys[start:start + BATCH_LIMIT]:
                    batch.delete(self._ref(collection, key))
                batch.commit()
            return len(keys)

        return await asyncio.to_thread(_do_delete)

    @_guard
    async def run_transaction(self, fn: Callable[[StoreTransaction], T]) -> T:
        def _run_in_thread():
            transaction = self.db.transaction()

            # 🔹 开启 Firestore 事务上下文（冲突时 SDK 自动重跑 fn）
            @firestore.transactional
            def _wrapped(transaction):
                return fn(FirestoreTransaction(self.db, transaction))

            return _wrapped(transaction)

        return await asyncio.to_thread(_run_in_thread)
