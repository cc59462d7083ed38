# @Time    : 2026/10/19
# @Author  : Pedro
# @File    : result.py
# @Software: PyCharm
"""
操作结果封装
------------------------------------------------------
✅ 业务异常 → OperationResult（携带 ErrorKind）
✅ 自动推送 operation-succeeded / operation-failed 事件
✅ 不重试：失败只上报，由用户手动重试
"""
from typing import Any, Awaitable, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from codeshare.core.enums import ErrorKind, EventName
from codeshare.core.exception import APIException
from codeshare.core.response import CodeShareResponse


class OperationResult(BaseModel):
    ok: bool
    msg: str = ""
    kind: Optional[ErrorKind] = None
    error_code: int = 0
    http_code: int = 200
    data: Any = None
    error: Optional[APIException] = Field(default=None, exclude=True)

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @classmethod
    def succeeded(cls, msg: str, data: Any = None) -> "OperationResult":
        return cls(ok=True, msg=msg, data=data)

    @classmethod
    def failed(cls, exc: APIException) -> "OperationResult":
        return cls(
            ok=False,
            msg=exc.msg,
            kind=exc.kind,
            error_code=exc.error_code,
            http_code=exc.http_code,
            error=exc,
        )

    def to_response(self):
        """失败时抛回原异常，由全局异常处理器统一渲染错误体"""
        if not self.ok:
            raise self.error
        return CodeShareResponse.success(data=self.data, msg=self.msg)


async def run_operation(bus, awaitable: Awaitable[Any], success_msg: str, *, uid: str | None = None) -> OperationResult:
    """
    执行一次业务操作：
        result = await run_operation(bus, registry.claim(code_id, session), "已复制兑换码")
        if result.kind is ErrorKind.FULLY_CLAIMED: ...
    """
    try:
        data = await awaitable
    except APIException as exc:
        logger.info(f"[operation-failed] kind={exc.kind.value} uid={uid} msg={exc.msg}")
        await bus.publish(EventName.OPERATION_FAILED, {"message": exc.msg, "kind": exc.kind.value, "uid": uid})
        return OperationResult.failed(exc)

    await bus.publish(EventName.OPERATION_SUCCEEDED, {"message": success_msg, "uid": uid})
    return OperationResult.succeeded(success_msg, data)
