# @Time    : 2026/10/19
# @Author  : Pedro
# @File    : response.py
# @Software: PyCharm
"""
CodeShare 通用响应模型
✅ 统一响应封装：success（错误体由全局异常处理器输出）
✅ 自动识别 Pydantic / dict / list
✅ Firestore, datetime, date 全兼容
"""

import json
import datetime
from typing import Any, Generic, Optional, TypeVar
from pydantic import BaseModel, Field, ConfigDict
from starlette.responses import JSONResponse

T = TypeVar("T")


# =========================================================
# ✅ 通用序列化函数
# =========================================================
def serialize(data: Any) -> Any:
    """递归序列化各种复杂对象到 JSON 安全格式"""
    if isinstance(data, (datetime.datetime, datetime.date)):
        return data.isoformat()

    if isinstance(data, set):
        return list(data)

    if isinstance(data, BaseModel):
        return serialize(data.model_dump(by_alias=True))

    if isinstance(data, (list, tuple)):
        return [serialize(i) for i in data]

    if isinstance(data, dict):
        return {k: serialize(v) for k, v in data.items()}

    return data


# =========================================================
# ✅ JSON Response
# =========================================================
class CodeShareJSONResponse(JSONResponse):
    """统一 JSONResponse 编码（UTF-8 + 禁止 ASCII 转义）"""
    def render(self, content: Any) -> bytes:
        return json.dumps(
            content,
            ensure_ascii=False,
            allow_nan=False,
            separators=(",", ":"),
        ).encode("utf-8")


# =========================================================
# ✅ CodeShareResponse 泛型模型（主类）
# =========================================================
class CodeShareResponse(BaseModel, Generic[T]):
    code: int = Field(default=0, description="状态码")
    msg: str = Field(default="success", description="消息")
    data: Optional[T] = Field(default=None, description="数据体")

    model_config = ConfigDict(arbitrary_types_allowed=True, from_attributes=True)

    @classmethod
    def success(cls, data: Optional[Any] = None, msg: str = "success", code: int = 0):
        """统一成功响应"""
        return CodeShareJSONResponse(content={"code": code, "msg": msg, "data": serialize(data)})
