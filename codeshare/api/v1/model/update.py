"""
# @Time    : 2026/10/19
# @Author  : Pedro
# @File    : update.py
# @Software: PyCharm
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Update(BaseModel):
    """updates/{id} 公告，只追加不修改"""

    id: Optional[str] = Field(default=None, exclude=True)
    text: str
    posted_by: str = Field(alias="postedBy")
    posted_at: datetime = Field(alias="postedAt")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_store(cls, key: str, data: dict) -> "Update":
        return cls(id=key, **data)
