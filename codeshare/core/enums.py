# -*- coding:utf-8 -*-
"""
CodeShare 枚举定义
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
✅ 错误类型（ErrorKind）
✅ 会话状态（SessionState）
✅ 事件名称（EventName）
"""

from enum import Enum


class ErrorKind(str, Enum):
    """
    业务错误分类
    调用方根据 kind 分支处理，不要匹配 msg 文本
    """

    AUTH = "auth_error"
    STORE_UNAVAILABLE = "store_unavailable"
    VALIDATION = "validation_error"
    PERMISSION_DENIED = "permission_denied"
    FULLY_CLAIMED = "fully_claimed"
    INSUFFICIENT_POINTS = "insufficient_points"
    NOT_FOUND = "not_found"
    INTERNAL = "internal_error"


class SessionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


class EventName(str, Enum):
    """推送给展示层的事件"""

    CODE_LIST_CHANGED = "code-list-changed"
    USER_POINTS_CHANGED = "user-points-changed"
    SESSION_CHANGED = "session-changed"
    OPERATION_SUCCEEDED = "operation-succeeded"
    OPERATION_FAILED = "operation-failed"
