"""
# @Time    : 2026/10/19
# @Author  : Pedro
# @File    : user.py
# @Software: PyCharm
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class PointsOut(BaseModel):
    uid: str
    points: int
    can_publish: bool = Field(serialization_alias="canPublish")
    publish_cost: int = Field(serialization_alias="publishCost")


class UpdateIn(BaseModel):
    text: str = Field(..., max_length=2000)


class UpdateOut(BaseModel):
    id: str
    text: str
    posted_by: str = Field(serialization_alias="postedBy")
    posted_at: Optional[datetime] = Field(default=None, serialization_alias="postedAt")
