"""
# @Time    : 2026/10/19
# @Author  : Pedro
# @File    : identity.py
# @Software: PyCharm

Firebase Authentication 身份提供方
------------------------------------------------------
✅ 邮箱密码注册 / 登录：Identity Toolkit REST（aiohttp）
✅ token 校验 / 退出：firebase_admin.auth
"""
import asyncio

import aiohttp
from firebase_admin import auth as firebase_auth
from loguru import logger

from codeshare.core.config import FirebaseConfig
from codeshare.core.exception import AuthError, StoreUnavailable
from codeshare.extension.google_tools.firebase_admin_service import init_firebase_admin
from codeshare.extension.identity.base import Identity, IdentityProvider

# Identity Toolkit 错误码 → 用户提示
ERROR_MESSAGES = {
    "EMAIL_EXISTS": "该邮箱已注册",
    "EMAIL_NOT_FOUND": "邮箱或密码错误",
    "INVALID_PASSWORD": "邮箱或密码错误",
    "INVALID_LOGIN_CREDENTIALS": "邮箱或密码错误",
    "INVALID_EMAIL": "邮箱格式不正确",
    "WEAK_PASSWORD": "密码至少 6 位",
    "USER_DISABLED": "账号已被禁用",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "尝试次数过多，请稍后再试",
}


class FirebaseIdentityProvider(IdentityProvider):
    name = "firebase"

    def __init__(self, config: FirebaseConfig):
        self.config = config

    # ======================================================
    # 📡 Identity Toolkit 请求封装
    # ======================================================
    async def _post(self, endpoint: str, payload: dict) -> tuple[int, dict]:
        url = f"{self.config.identity_url.rstrip('/')}/accounts:{endpoint}"
        timeout = aiohttp.ClientTimeout(total=self.config.timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(url, params={"key": self.config.api_key}, json=payload) as resp:
                try:
                    data = await resp.json(content_type=None) or {}
                except ValueError:
                    data = {}
                return resp.status, data

    async def _call(self, endpoint: str, email: str, password: str) -> Identity:
        if not self.config.api_key:
            raise AuthError("未配置 Firebase API Key")
        try:
            status, data = await self._post(
                endpoint, {"email": email, "password": password, "returnSecureToken": True}
            )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"🔥 Identity Toolkit 请求失败 {endpoint}: {e}")
            raise StoreUnavailable("认证服务暂不可用，请稍后重试")

        if status >= 500:
            raise StoreUnavailable("认证服务暂不可用，请稍后重试")
        if status != 200:
            # "WEAK_PASSWORD : Password should be at least 6 characters"
            code = (data.get("error", {}).get("message") or "").split(":")[0].strip()
            raise AuthError(ERROR_MESSAGES.get(code, code or "认证失败"))

        return Identity(
            uid=data["localId"],
            email=data.get("email", email),
            id_token=data.get("idToken"),
            refresh_token=data.get("refreshToken"),
        )

    async def sign_up(self, email: str, password: str) -> Identity:
        return await self._call("signUp", email, password)

    async def sign_in(self, email: str, password: str) -> Identity:
        return await self._call("signInWithPassword", email, password)

    async def sign_out(self, identity: Identity) -> None:
        app = init_firebase_admin()
        await asyncio.to_thread(firebase_auth.revoke_refresh_tokens, identity.uid, app)

    async def verify(self, id_token: str) -> Identity:
        if not id_token:
            raise AuthError("缺少 id_token")
        app = init_firebase_admin()
        try:
            dec = await asyncio.to_thread(
                firebase_auth.verify_id_token, id_token, app, True, 60
            )
        except (firebase_auth.InvalidIdTokenError, firebase_auth.ExpiredIdTokenError,
                firebase_auth.RevokedIdTokenError, firebase_auth.UserDisabledError, ValueError) as e:
            raise AuthError(f"登录已失效: {e}")
        return Identity(uid=dec["uid"], email=dec.get("email", ""), id_token=id_token)
