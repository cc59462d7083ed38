"""
# @Time    : 2026/10/19
# @Author  : Pedro
# @File    : code.py
# @Software: PyCharm
"""
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

ADMIN_PUBLISHER = "admin"


class Code(BaseModel):
    """codes/{id} 文档（字段名与线上数据一致，camelCase）"""

    id: Optional[str] = Field(default=None, exclude=True)
    code: str
    coin: str
    max_claims: int = Field(alias="maxClaims")
    claimed_count: int = Field(default=0, alias="claimedCount")
    expiry_date: date = Field(alias="expiryDate")
    published_by: str = Field(alias="publishedBy")
    published_at: Optional[datetime] = Field(default=None, alias="publishedAt")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_store(cls, key: str, data: dict) -> "Code":
        payload = dict(data)
        payload.setdefault("claimedCount", 0)
        # 旧数据 expiryDate 可能是完整 ISO 时间
        expiry = payload.get("expiryDate")
        if isinstance(expiry, str) and "T" in expiry:
            payload["expiryDate"] = expiry.split("T", 1)[0]
        elif isinstance(expiry, datetime):
            payload["expiryDate"] = expiry.date()
        return cls(id=key, **payload)

    @property
    def is_fully_claimed(self) -> bool:
        return self.claimed_count >= self.max_claims
