"""
# @Time    : 2026/10/19
# @Author  : Pedro
# @File    : code.py
# @Software: PyCharm
"""
from datetime import date, datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from codeshare.api.v1.model.code import Code

MASKED_CODE = "••••••••"


class CodeDraft(BaseModel):
    """发布兑换码参数（字段校验在 CodeRegistry 内完成）"""

    code: Optional[str] = None
    coin: Optional[str] = None
    max_claims: Optional[Union[StrictInt, str]] = Field(default=None, alias="maxClaims")
    expiry_date: Optional[Union[date, str]] = Field(default=None, alias="expiryDate")

    model_config = ConfigDict(populate_by_name=True)


class CodeOut(BaseModel):
    id: str
    code: str
    coin: str
    max_claims: int = Field(serialization_alias="maxClaims")
    claimed_count: int = Field(serialization_alias="claimedCount")
    expiry_date: date = Field(serialization_alias="expiryDate")
    published_by: str = Field(serialization_alias="publishedBy")
    published_at: Optional[datetime] = Field(default=None, serialization_alias="publishedAt")
    fully_claimed: bool = Field(serialization_alias="fullyClaimed")

    @classmethod
    def from_code(cls, code: Code, *, masked: bool = False) -> "CodeOut":
        return cls(
            id=code.id,
            code=MASKED_CODE if masked else code.code,
            coin=code.coin,
            max_claims=code.max_claims,
            claimed_count=code.claimed_count,
            expiry_date=code.expiry_date,
            published_by=code.published_by,
            published_at=code.published_at,
            fully_claimed=code.is_fully_claimed,
        )


class CodeStats(BaseModel):
    available_codes: int = Field(serialization_alias="availableCodes")
    total_claims: int = Field(serialization_alias="totalClaims")


class PurgeResult(BaseModel):
    deleted: int
