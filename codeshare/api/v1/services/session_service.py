"""
# @Time    : 2026/10/19
# @Author  : Pedro
# @File    : session_service.py
# @Software: PyCharm

会话 / 角色控制
------------------------------------------------------
两种状态：UNAUTHENTICATED / AUTHENTICATED(identity, is_admin)
- 进入 AUTHENTICATED 时确保积分账户存在，并按管理员白名单计算角色
- 角色在会话内固定，不再变化
- SessionContext 显式传入每个业务操作
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Iterable, Optional

from loguru import logger

from codeshare.core.enums import EventName, SessionState
from codeshare.core.exception import AuthError, PermissionDenied
from codeshare.extension.identity.base import Identity
from codeshare.util.timeutil import Clock, utc_now


@dataclass(frozen=True)
class SessionContext:
    state: SessionState = SessionState.UNAUTHENTICATED
    identity: Optional[Identity] = None
    is_admin: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.state is SessionState.AUTHENTICATED and self.identity is not None

    @property
    def uid(self) -> Optional[str]:
        return self.identity.uid if self.identity else None

    @property
    def email(self) -> Optional[str]:
        return self.identity.email if self.identity else None

    def require_user(self) -> Identity:
        if not self.is_authenticated:
            raise AuthError("请先登录")
        return self.identity

    def require_admin(self) -> Identity:
        identity = self.require_user()
        if not self.is_admin:
            raise PermissionDenied()
        return identity


ANONYMOUS = SessionContext()


class SessionController:

    def __init__(
            self,
            identity_provider,
            ledger,
            bus,
            *,
            admin_emails: Iterable[str] = (),
            admin_session_ttl_seconds: int = 3600,
            clock: Clock = utc_now,
    ):
        self.identity_provider = identity_provider
        self.ledger = ledger
        self.bus = bus
        self.admin_emails = frozenset(e.strip().lower() for e in admin_emails if e and e.strip())
        self.admin_session_ttl = timedelta(seconds=admin_session_ttl_seconds)
        self.clock = clock
        # uid -> 最近一次活跃时间
        self._admin_seen: Dict[str, datetime] = {}

    def is_admin_email(self, email: Optional[str]) -> bool:
        return bool(email) and email.strip().lower() in self.admin_emails

    def _build(self, identity: Identity) -> SessionContext:
        is_admin = self.is_admin_email(identity.email)
        if is_admin:
            self._admin_seen[identity.uid] = self.clock()
        return SessionContext(state=SessionState.AUTHENTICATED, identity=identity, is_admin=is_admin)

    async def _enter(self, identity: Identity) -> SessionContext:
        await self.ledger.ensure_entry(identity.uid)
        session = self._build(identity)
        logger.info(f"🔑 会话建立 uid={identity.uid} admin={session.is_admin}")
        await self.bus.publish(EventName.SESSION_CHANGED, {
            "uid": identity.uid,
            "state": session.state.value,
            "is_admin": session.is_admin,
        })
        return session

    # ==================================================
    # 🔐 注册 / 登录 / 恢复 / 退出
    # ==================================================
    async def sign_up(self, email: str, password: str) -> SessionContext:
        identity = await self.identity_provider.sign_up(email, password)
        return await self._enter(identity)

    async def sign_in(self, email: str, password: str) -> SessionContext:
        identity = await self.identity_provider.sign_in(email, password)
        return await self._enter(identity)

    async def resume(self, id_token: Optional[str], *, ensure_ledger: bool = False) -> SessionContext:
        """按 token 恢复会话；无 token 返回匿名会话"""
        if not id_token:
            return ANONYMOUS
        identity = await self.identity_provider.verify(id_token)
        if ensure_ledger:
            await self.ledger.ensure_entry(identity.uid)
        return self._build(identity)

    async def sign_out(self, session: SessionContext) -> SessionContext:
        if not session.is_authenticated:
            return ANONYMOUS
        await self.identity_provider.sign_out(session.identity)
        self._admin_seen.pop(session.uid, None)
        logger.info(f"👋 会话结束 uid={session.uid}")
        await self.bus.publish(EventName.SESSION_CHANGED, {
            "uid": session.uid,
            "state": SessionState.UNAUTHENTICATED.value,
            "is_admin": False,
        })
        return ANONYMOUS

    # ==================================================
    # 🧹 过期清理开关：有活跃管理员会话时才清理
    # ==================================================
    def admin_active(self, now: Optional[datetime] = None) -> bool:
        now = now or self.clock()
        for uid, seen in list(self._admin_seen.items()):
            if now - seen > self.admin_session_ttl:
                self._admin_seen.pop(uid, None)
        return bool(self._admin_seen)
