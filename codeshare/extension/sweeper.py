"""
# @Time    : 2026/10/19
# @Author  : Pedro
# @File    : sweeper.py
# @Software: PyCharm

过期兑换码定时清理
------------------------------------------------------
✅ 每 sweep_interval_seconds 执行一次 purge_expired
✅ 仅在有活跃管理员会话时执行（或 sweep_without_admin）
✅ 多进程重复清理是幂等的
"""
import asyncio
from datetime import datetime
from typing import Optional

from loguru import logger

from codeshare.core.service_manager import BaseService


class ExpirySweepService(BaseService):
    name = "expiry_sweeper"

    def __init__(self, registry, sessions, *, interval_seconds: int = 3600, sweep_without_admin: bool = False):
        self.registry = registry
        self.sessions = sessions
        self.interval_seconds = interval_seconds
        self.sweep_without_admin = sweep_without_admin
        self._task: Optional[asyncio.Task] = None

    def enabled(self, now: Optional[datetime] = None) -> bool:
        return self.sweep_without_admin or self.sessions.admin_active(now)

    async def run_once(self, now: Optional[datetime] = None) -> Optional[int]:
        """执行一次清理；未启用时返回 None"""
        if not self.enabled(now):
            logger.debug("⏭️ 无活跃管理员会话，跳过过期清理")
            return None
        return await self.registry.purge_expired(now)

    async def _loop(self):
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.run_once()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning(f"⚠️ 过期清理失败: {e}")

    async def init(self):
        if self._task and not self._task.done():
            return
        self._task = asyncio.create_task(self._loop())
        logger.info(f"🧹 过期清理任务已启动 interval={self.interval_seconds}s")

    async def close(self):
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
