# -*- coding: utf-8 -*-
"""
# @Time    : 2026/10/19
# @Author  : Pedro
# @File    : base.py
# @Software: PyCharm

文档存储抽象层
------------------------------------------------------
业务层只依赖这里的接口：
- 按 key 读取 / 写入 / 不存在才创建
- 按字段过滤查询（==, <, <=, >, >=）
- 服务端原子自增
- 批量删除（单批次全部成功或全部失败）
- 事务（读在前、写在后，提交时一次性生效）
"""
import operator
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, TypeVar

T = TypeVar("T")

OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


@dataclass(frozen=True)
class FieldFilter:
    field_path: str
    op_string: str
    value: Any

    def __post_init__(self):
        if self.op_string not in OPERATORS:
            raise ValueError(f"不支持的查询操作符: {self.op_string}")

    def matches(self, data: Dict[str, Any]) -> bool:
        if self.field_path not in data:
            return False
        try:
            return OPERATORS[self.op_string](data[self.field_path], self.value)
        except TypeError:
            return False


@dataclass
class Document:
    key: str
    data: Dict[str, Any] = field(default_factory=dict)


class StoreTransaction(ABC):
    """事务句柄：所有读取必须在写入之前完成"""

    @abstractmethod
    def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def set(self, collection: str, key: str, data: Dict[str, Any], merge: bool = False) -> None:
        ...

    @abstractmethod
    def add(self, collection: str, data: Dict[str, Any]) -> str:
        ...

    @abstractmethod
    def increment(self, collection: str, key: str, fields: Dict[str, int], extra: Optional[Dict[str, Any]] = None) -> None:
        ...

    @abstractmethod
    def delete(self, collection: str, key: str) -> None:
        ...


class DocumentStore(ABC):
    """文档数据库接口（Firestore / 内存实现）"""

    name: str = "store"

    @abstractmethod
    async def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    async def create(self, collection: str, key: str, data: Dict[str, Any]) -> bool:
        """不存在才创建；已存在返回 False，不覆盖"""

    @abstractmethod
    async def set(self, collection: str, key: str, data: Dict[str, Any], merge: bool = False) -> None:
        ...

    @abstractmethod
    async def add(self, collection: str, data: Dict[str, Any]) -> str:
        """写入新文档，返回存储分配的 key"""

    @abstractmethod
    async def query(
            self,
            collection: str,
            *filters: FieldFilter,
            order_by: Optional[str] = None,
            descending: bool = False,
            limit: Optional[int] = None,
    ) -> List[Document]:
        ...

    @abstractmethod
    async def increment(self, collection: str, key: str, fields: Dict[str, int], extra: Optional[Dict[str, Any]] = None) -> None:
        """服务端原子自增；文档不存在时抛 NotFound"""

    @abstractmethod
    async def delete(self, collection: str, key: str) -> None:
        """删除不存在的文档视为成功"""

    @abstractmethod
    async def delete_many(self, collection: str, keys: List[str]) -> int:
        ...

    @abstractmethod
    async def run_transaction(self, fn: Callable[[StoreTransaction], T]) -> T:
        """
        执行事务：
            def _tx(tx):
                user = tx.get("users", uid)
                tx.increment("users", uid, {"points": -5})
                return tx.add("codes", {...})
            key = await store.run_transaction(_tx)
        fn 抛出异常时不会写入任何内容。
        """

    async def close(self) -> None:
        pass
