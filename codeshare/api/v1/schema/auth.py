"""
# @Time    : 2026/10/19
# @Author  : Pedro
# @File    : auth.py
# @Software: PyCharm
"""
from typing import Optional

from pydantic import BaseModel, Field


class CredentialsSchema(BaseModel):
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1, max_length=128)


class SessionOut(BaseModel):
    state: str
    uid: Optional[str] = None
    email: Optional[str] = None
    is_admin: bool = Field(default=False, serialization_alias="isAdmin")
    id_token: Optional[str] = Field(default=None, serialization_alias="idToken")
    refresh_token: Optional[str] = Field(default=None, serialization_alias="refreshToken")
    points: Optional[int] = None
