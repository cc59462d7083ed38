"""
# @Time    : 2026/10/19
# @Author  : Pedro
# @File    : base.py
# @Software: PyCharm
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Identity:
    uid: str
    email: str
    id_token: Optional[str] = None
    refresh_token: Optional[str] = None


class IdentityProvider(ABC):
    """身份提供方：注册 / 登录 / 退出 / 校验 token"""

    name: str = "identity"

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> Identity:
        ...

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> Identity:
        ...

    @abstractmethod
    async def sign_out(self, identity: Identity) -> None:
        ...

    @abstractmethod
    async def verify(self, id_token: str) -> Identity:
        """校验 id_token，失败抛 AuthError"""

    async def close(self) -> None:
        pass
