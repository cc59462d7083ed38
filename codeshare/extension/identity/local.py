"""
# @Time    : 2026/10/19
# @Author  : Pedro
# @File    : local.py
# @Software: PyCharm

进程内身份提供方（本地开发 / 测试），规则与 Firebase Auth 邮箱密码登录一致
"""
import secrets
import uuid
from typing import Dict, Tuple

from passlib.context import CryptContext

from codeshare.core.exception import AuthError
from codeshare.extension.identity.base import Identity, IdentityProvider

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

MIN_PASSWORD_LENGTH = 6


class LocalIdentityProvider(IdentityProvider):
    name = "local"

    def __init__(self):
        # email -> (uid, password_hash)
        self._accounts: Dict[str, Tuple[str, str]] = {}
        # token -> (uid, email)
        self._tokens: Dict[str, Tuple[str, str]] = {}

    @staticmethod
    def _normalize(email: str) -> str:
        return (email or "").strip().lower()

    def _issue(self, uid: str, email: str) -> Identity:
        token = secrets.token_urlsafe(32)
        self._tokens[token] = (uid, email)
        return Identity(uid=uid, email=email, id_token=token, refresh_token=secrets.token_urlsafe(32))

    async def sign_up(self, email: str, password: str) -> Identity:
        email = self._normalize(email)
        if not email or "@" not in email:
            raise AuthError("邮箱格式不正确")
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise AuthError(f"密码至少 {MIN_PASSWORD_LENGTH} 位")
        if email in self._accounts:
            raise AuthError("该邮箱已注册")

        uid = uuid.uuid4().hex[:28]
        self._accounts[email] = (uid, pwd_context.hash(password))
        return self._issue(uid, email)

    async def sign_in(self, email: str, password: str) -> Identity:
        email = self._normalize(email)
        account = self._accounts.get(email)
        if not account or not pwd_context.verify(password or "", account[1]):
            raise AuthError("邮箱或密码错误")
        return self._issue(account[0], email)

    async def sign_out(self, identity: Identity) -> None:
        for token, (uid, _) in list(self._tokens.items()):
            if uid == identity.uid:
                self._tokens.pop(token, None)

    async def verify(self, id_token: str) -> Identity:
        found = self._tokens.get(id_token or "")
        if not found:
            raise AuthError("登录已失效，请重新登录")
        return Identity(uid=found[0], email=found[1], id_token=id_token)
