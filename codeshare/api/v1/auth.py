"""
# @Time    : 2026/10/19
# @Author  : Pedro
# @File    : auth.py
# @Software: PyCharm
"""
from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials

from codeshare.api.v1.schema.auth import CredentialsSchema, SessionOut
from codeshare.api.v1.services import ServiceContainer
from codeshare.api.v1.services.session_service import SessionContext
from codeshare.core.auth import bearer_token, get_container, get_session, security_scheme
from codeshare.core.response import CodeShareResponse
from codeshare.core.result import run_operation

rp = APIRouter(prefix="/auth", tags=["认证"])


async def _session_out(container: ServiceContainer, session: SessionContext, *, with_tokens: bool = False) -> SessionOut:
    if not session.is_authenticated:
        return SessionOut(state=session.state.value)
    return SessionOut(
        state=session.state.value,
        uid=session.uid,
        email=session.email,
        is_admin=session.is_admin,
        id_token=session.identity.id_token if with_tokens else None,
        refresh_token=session.identity.refresh_token if with_tokens else None,
        points=await container.ledger.get_points(session.uid),
    )


@rp.post("/signup", name="邮箱注册")
async def sign_up(body: CredentialsSchema, container: ServiceContainer = Depends(get_container)):
    async def _do():
        session = await container.sessions.sign_up(body.email, body.password)
        return await _session_out(container, session, with_tokens=True)

    result = await run_operation(container.bus, _do(), "账号已创建")
    return result.to_response()


@rp.post("/login", name="邮箱登录")
async def sign_in(body: CredentialsSchema, container: ServiceContainer = Depends(get_container)):
    async def _do():
        session = await container.sessions.sign_in(body.email, body.password)
        return await _session_out(container, session, with_tokens=True)

    result = await run_operation(container.bus, _do(), "登录成功")
    return result.to_response()


@rp.post("/logout", name="退出登录")
async def sign_out(
        session: SessionContext = Depends(get_session),
        container: ServiceContainer = Depends(get_container),
):
    async def _do():
        anonymous = await container.sessions.sign_out(session)
        return await _session_out(container, anonymous)

    result = await run_operation(container.bus, _do(), "已退出登录", uid=session.uid)
    return result.to_response()


@rp.get("/session", name="当前会话")
async def current_session(
        credentials: HTTPAuthorizationCredentials = Depends(security_scheme),
        container: ServiceContainer = Depends(get_container),
):
    # 页面加载时调用：首次看到的用户在这里建档
    session = await container.sessions.resume(bearer_token(credentials), ensure_ledger=True)
    return CodeShareResponse.success(data=await _session_out(container, session))
