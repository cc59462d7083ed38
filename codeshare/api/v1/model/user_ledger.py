"""
# @Time    : 2026/10/19
# @Author  : Pedro
# @File    : user_ledger.py
# @Software: PyCharm
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UserLedgerEntry(BaseModel):
    """users/{uid} 积分账户"""

    uid: str = Field(exclude=True)
    points: int = 0
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    last_ad_watch: Optional[datetime] = Field(default=None, alias="lastAdWatch")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_store(cls, uid: str, data: dict) -> "UserLedgerEntry":
        payload = dict(data)
        payload["points"] = int(payload.get("points") or 0)
        return cls(uid=uid, **payload)
