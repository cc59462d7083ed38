"""
# @Time    : 2026/10/19
# @Author  : Pedro
# @File    : auth.py
# @Software: PyCharm

FastAPI 依赖：容器 / 会话 / 登录 / 管理员
"""
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from codeshare.api.v1.services import ServiceContainer
from codeshare.api.v1.services.session_service import SessionContext

security_scheme = HTTPBearer(auto_error=False)


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def bearer_token(credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    return credentials.credentials if credentials else None


async def get_session(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme),
        container: ServiceContainer = Depends(get_container),
) -> SessionContext:
    """无 token → 匿名会话；token 无效 → AuthError"""
    return await container.sessions.resume(bearer_token(credentials))


async def login_required(session: SessionContext = Depends(get_session)) -> SessionContext:
    session.require_user()
    return session
