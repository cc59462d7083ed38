"""
# @Time    : 2026/10/19
# @Author  : Pedro
# @File    : update_service.py
# @Software: PyCharm
"""
from typing import List

from loguru import logger

from codeshare.api.v1.model.update import Update
from codeshare.api.v1.services.session_service import SessionContext
from codeshare.core.exception import ValidationError
from codeshare.util.timeutil import Clock, iso_now, utc_now

UPDATES = "updates"


class UpdateService:
    """公告板：只追加，不修改不删除"""

    def __init__(self, store, bus, *, clock: Clock = utc_now):
        self.store = store
        self.bus = bus
        self.clock = clock

    async def post(self, text: str, session: SessionContext) -> str:
        identity = session.require_admin()
        text = (text or "").strip()
        if not text:
            raise ValidationError("公告内容不能为空")

        update_id = await self.store.add(UPDATES, {
            "text": text,
            "postedBy": identity.uid,
            "postedAt": iso_now(self.clock),
        })
        logger.info(f"📢 公告已发布 id={update_id} by={identity.email}")
        return update_id

    async def list_recent(self, limit: int = 20) -> List[Update]:
        docs = await self.store.query(UPDATES, order_by="postedAt", descending=True, limit=limit)
        return [Update.from_store(d.key, d.data) for d in docs]
