# -*- coding: utf-8 -*-
"""
CodeShare exception system
--------------------------
✅ 统一业务异常（带 ErrorKind）
✅ FastAPI 全局异常处理器
"""
import traceback
import uuid
from typing import Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel

from codeshare.core.enums import ErrorKind


class APIExceptionModel(BaseModel):
    msg: str = "sorry, we made a mistake (*￣︶￣)!"
    error_code: int = 999
    kind: str = ErrorKind.INTERNAL.value
    request: Optional[str] = None
    trace_id: Optional[str] = None


class APIException(Exception):
    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, msg="sorry, we made a mistake (*￣︶￣)!", error_code=999, http_code=400):
        super().__init__(msg)
        self.msg = msg
        self.error_code = error_code
        self.http_code = http_code

    def to_dict(self, request: Optional[Request] = None):
        req_str = f"{request.method} {request.url.path}" if request else None
        return APIExceptionModel(
            msg=self.msg, error_code=self.error_code, kind=self.kind.value, request=req_str
        ).model_dump()


class AuthError(APIException):
    """账号密码错误 / 邮箱已注册 / token 无效"""
    kind = ErrorKind.AUTH

    def __init__(self, msg="认证失败", error_code=1003):
        super().__init__(msg, error_code, http_code=401)


class PermissionDenied(APIException):
    kind = ErrorKind.PERMISSION_DENIED

    def __init__(self, msg="需要管理员权限", error_code=1004):
        super().__init__(msg, error_code, http_code=403)


class NotFound(APIException):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, msg="资源未找到", error_code=1001):
        super().__init__(msg, error_code, http_code=404)


class ValidationError(APIException):
    kind = ErrorKind.VALIDATION

    def __init__(self, msg="参数错误", error_code=1002):
        super().__init__(msg, error_code, http_code=422)


class InsufficientPoints(APIException):
    kind = ErrorKind.INSUFFICIENT_POINTS

    def __init__(self, msg="积分不足", error_code=2001, required: int = 0, available: int = 0):
        super().__init__(msg, error_code, http_code=402)
        self.required = required
        self.available = available


class FullyClaimedError(APIException):
    kind = ErrorKind.FULLY_CLAIMED

    def __init__(self, msg="该兑换码已被领完", error_code=2002):
        super().__init__(msg, error_code, http_code=409)


class StoreUnavailable(APIException):
    """后端存储（Firestore / 网络）不可用"""
    kind = ErrorKind.STORE_UNAVAILABLE

    def __init__(self, msg="数据服务暂不可用，请稍后重试", error_code=5003):
        super().__init__(msg, error_code, http_code=503)


class InternalServerError(APIException):
    def __init__(self, msg="服务器内部错误", error_code=5001):
        super().__init__(msg, error_code, http_code=500)


def build_error_response(request: Request, exc: APIException, trace_id=None) -> JSONResponse:
    model = APIExceptionModel(
        msg=exc.msg,
        error_code=exc.error_code,
        kind=exc.kind.value,
        request=f"{request.method} {request.url.path}",
        trace_id=trace_id or uuid.uuid4().hex[:8],
    )
    content = model.model_dump()
    content["code"] = exc.error_code
    return JSONResponse(status_code=exc.http_code, content=content)


def register_exception_handlers(app):

    @app.exception_handler(APIException)
    async def api_exception_handler(request: Request, exc: APIException):
        if exc.http_code >= 500:
            logger.warning(f"[{exc.kind.value}] {request.method} {request.url.path} - {exc.msg}")
        return build_error_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        first_err = exc.errors()[0] if exc.errors() else {}
        msg = first_err.get("msg", "参数错误")
        return build_error_response(request, ValidationError(msg, error_code=1005))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        trace_id = uuid.uuid4().hex[:8]
        tb_str = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        logger.error(f"[Unhandled] TraceID={trace_id} {request.method} {request.url.path}\n{tb_str}")
        return build_error_response(request, InternalServerError("服务器内部异常，请稍后重试", 9999), trace_id)
