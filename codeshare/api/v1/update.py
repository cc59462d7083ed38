"""
# @Time    : 2026/10/19
# @Author  : Pedro
# @File    : update.py
# @Software: PyCharm
"""
from fastapi import APIRouter, Depends, Query

from codeshare.api.v1.schema.user import UpdateOut
from codeshare.api.v1.services import ServiceContainer
from codeshare.core.auth import get_container
from codeshare.core.response import CodeShareResponse

rp = APIRouter(prefix="/updates", tags=["公告"])


@rp.get("", name="最新公告")
async def list_updates(
        limit: int = Query(20, ge=1, le=100),
        container: ServiceContainer = Depends(get_container),
):
    updates = await container.updates.list_recent(limit)
    return CodeShareResponse.success(data=[
        UpdateOut(id=u.id, text=u.text, posted_by=u.posted_by, posted_at=u.posted_at) for u in updates
    ])
