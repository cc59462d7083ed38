"""
# @Time    : 2026/10/19
# @Author  : Pedro
# @File    : user_ledger.py
# @Software: PyCharm

用户积分账本
------------------------------------------------------
✅ 首次登录自动建档（points = 0，只创建一次）
✅ 入账 / 扣款全部走服务端原子自增，不整体覆盖
✅ 看广告奖励（固定延迟后 +ad_reward）
"""
import asyncio

from loguru import logger

from codeshare.api.v1.model.user_ledger import UserLedgerEntry
from codeshare.core.enums import EventName
from codeshare.core.exception import ValidationError
from codeshare.util.timeutil import Clock, iso_now, utc_now

USERS = "users"


class UserLedger:

    def __init__(
            self,
            store,
            bus,
            *,
            publish_cost: int = 5,
            ad_reward: int = 10,
            ad_delay_seconds: float = 3.0,
            clock: Clock = utc_now,
    ):
        self.store = store
        self.bus = bus
        self.publish_cost = publish_cost
        self.ad_reward = ad_reward
        self.ad_delay_seconds = ad_delay_seconds
        self.clock = clock

    # ==================================================
    # 🧾 建档 / 查询
    # ==================================================
    async def ensure_entry(self, uid: str) -> UserLedgerEntry:
        data = await self.store.get(USERS, uid)
        if data is not None:
            return UserLedgerEntry.from_store(uid, data)

        fresh = {"points": 0, "createdAt": iso_now(self.clock)}
        created = await self.store.create(USERS, uid, fresh)
        if not created:
            # 并发建档：以先写入的为准
            data = await self.store.get(USERS, uid) or fresh
            return UserLedgerEntry.from_store(uid, data)

        logger.info(f"🧾 新用户积分账户已创建 uid={uid}")
        await self.bus.publish(EventName.USER_POINTS_CHANGED, {"uid": uid, "points": 0})
        return UserLedgerEntry.from_store(uid, fresh)

    async def get_entry(self, uid: str) -> UserLedgerEntry | None:
        data = await self.store.get(USERS, uid)
        return UserLedgerEntry.from_store(uid, data) if data is not None else None

    async def get_points(self, uid: str) -> int:
        entry = await self.get_entry(uid)
        return entry.points if entry else 0

    async def can_publish(self, uid: str) -> bool:
        return await self.get_points(uid) >= self.publish_cost

    # ==================================================
    # 💰 入账 / 💸 扣款
    # ==================================================
    @staticmethod
    def _check_amount(amount: int):
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise ValidationError(f"无效积分数量: {amount}")

    async def _apply(self, uid: str, delta: int, extra: dict | None = None):
        await self.store.increment(USERS, uid, {"points": delta}, extra)
        await self.bus.publish(EventName.USER_POINTS_CHANGED, {"uid": uid, "delta": delta})

    async def credit(self, uid: str, amount: int, *, extra: dict | None = None) -> None:
        self._check_amount(amount)
        await self._apply(uid, amount, extra)

    async def debit(self, uid: str, amount: int) -> None:
        """不做余额下限检查，发布兑换码走 CodeRegistry 的事务扣款"""
        self._check_amount(amount)
        await self._apply(uid, -amount)

    # ==================================================
    # 📺 看广告奖励
    # ==================================================
    async def watch_ad(self, uid: str) -> int:
        if self.ad_delay_seconds > 0:
            await asyncio.sleep(self.ad_delay_seconds)
        await self.credit(uid, self.ad_reward, extra={"lastAdWatch": iso_now(self.clock)})
        logger.info(f"📺 广告奖励 uid={uid} +{self.ad_reward}")
        return self.ad_reward
