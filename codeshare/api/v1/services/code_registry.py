"""
# @Time    : 2026/10/19
# @Author  : Pedro
# @File    : code_registry.py
# @Software: PyCharm

兑换码注册表
------------------------------------------------------
✅ 有效期内兑换码列表（expiryDate >= 今天）
✅ 发布：积分检查 → 事务内扣积分 + 写入兑换码
✅ 领取：原子自增 claimedCount（可选领完拦截）
✅ 管理员：全部列表 / 添加 / 删除 / 清理过期
"""
from datetime import date, datetime
from typing import Iterable, List, Optional

from loguru import logger
from pydantic import ValidationError as ModelValidationError

from codeshare.api.v1.model.code import ADMIN_PUBLISHER, Code
from codeshare.api.v1.schema.code import CodeDraft
from codeshare.api.v1.services.session_service import SessionContext
from codeshare.api.v1.services.user_ledger import USERS
from codeshare.core.enums import EventName
from codeshare.core.exception import FullyClaimedError, InsufficientPoints, NotFound, ValidationError
from codeshare.extension.store.base import FieldFilter
from codeshare.util.timeutil import Clock, iso_now, today_of, utc_now

CODES = "codes"
MAX_CODE_LENGTH = 64


class CodeRegistry:

    def __init__(
            self,
            store,
            ledger,
            bus,
            *,
            coins: Iterable[str],
            publish_cost: int = 5,
            enforce_max_claims: bool = True,
            clock: Clock = utc_now,
    ):
        self.store = store
        self.ledger = ledger
        self.bus = bus
        self.coins = [c.strip().upper() for c in coins]
        self.publish_cost = publish_cost
        self.enforce_max_claims = enforce_max_claims
        self.clock = clock

    def _today(self, now: Optional[datetime | date]) -> date:
        return today_of(now or self.clock())

    async def _changed(self, reason: str, **data):
        await self.bus.publish(EventName.CODE_LIST_CHANGED, {"reason": reason, **data})

    @staticmethod
    def _load(code_id: str, data: dict) -> Code:
        try:
            return Code.from_store(code_id, data)
        except (ModelValidationError, TypeError):
            raise ValidationError(f"兑换码数据无效: {code_id}")

    def _load_many(self, docs) -> List[Code]:
        """跳过字段无效的历史文档（如 expiryDate="tomorrow"、maxClaims=NaN）"""
        codes = []
        for d in docs:
            try:
                codes.append(Code.from_store(d.key, d.data))
            except (ModelValidationError, TypeError) as e:
                logger.warning(f"⚠️ 跳过无效兑换码文档 id={d.key}: {e}")
        return codes

    # ==================================================
    # 📋 查询
    # ==================================================
    async def list_active(self, now: Optional[datetime | date] = None) -> List[Code]:
        today = self._today(now).isoformat()
        docs = await self.store.query(CODES, FieldFilter("expiryDate", ">=", today))
        return self._load_many(docs)

    async def list_all(self, session: SessionContext) -> List[Code]:
        session.require_admin()
        docs = await self.store.query(CODES)
        return self._load_many(docs)

    async def get(self, code_id: str) -> Code:
        data = await self.store.get(CODES, code_id)
        if data is None:
            raise NotFound("兑换码不存在")
        return self._load(code_id, data)

    async def stats(self, now: Optional[datetime | date] = None) -> dict:
        codes = await self.list_active(now)
        return {
            "available_codes": len(codes),
            "total_claims": sum(c.claimed_count for c in codes),
        }

    # ==================================================
    # ✅ 发布参数校验
    # ==================================================
    def validate_draft(self, draft: CodeDraft, today: date) -> dict:
        value = (draft.code or "").strip().upper()
        if not value:
            raise ValidationError("兑换码不能为空")
        if len(value) > MAX_CODE_LENGTH:
            raise ValidationError(f"兑换码长度不能超过 {MAX_CODE_LENGTH}")

        coin = (draft.coin or "").strip().upper()
        if not coin:
            raise ValidationError("请选择币种")
        if coin not in self.coins:
            raise ValidationError(f"不支持的币种: {draft.coin}")

        raw_max = draft.max_claims
        if isinstance(raw_max, str):
            raw_max = raw_max.strip()
            if not raw_max.isdigit():
                raise ValidationError("可领取次数必须是正整数")
            raw_max = int(raw_max)
        if raw_max is None or isinstance(raw_max, bool) or not isinstance(raw_max, int) or raw_max <= 0:
            raise ValidationError("可领取次数必须是正整数")

        expiry = draft.expiry_date
        if isinstance(expiry, str):
            try:
                expiry = date.fromisoformat(expiry.strip())
            except ValueError:
                raise ValidationError(f"无效的过期日期: {draft.expiry_date}")
        if not isinstance(expiry, date):
            raise ValidationError("请填写过期日期")
        if isinstance(expiry, datetime):
            expiry = expiry.date()
        if expiry < today:
            raise ValidationError("过期日期不能早于今天")

        return {"code": value, "coin": coin, "maxClaims": raw_max, "expiryDate": expiry.isoformat()}

    def _new_document(self, fields: dict, published_by: str) -> dict:
        return {
            **fields,
            "claimedCount": 0,
            "publishedBy": published_by,
            "publishedAt": iso_now(self.clock),
        }

    # ==================================================
    # 🚀 用户发布（扣积分 + 写入，同一事务）
    # ==================================================
    async def publish(self, draft: CodeDraft, session: SessionContext) -> str:
        uid = session.require_user().uid
        fields = self.validate_draft(draft, self._today(None))
        cost = self.publish_cost

        # 事务前先检查，积分不足时不做任何写入
        points = await self.ledger.get_points(uid)
        if points < cost:
            raise InsufficientPoints(f"至少需要 {cost} 积分才能发布兑换码", required=cost, available=points)

        document = self._new_document(fields, uid)

        def _tx(tx):
            entry = tx.get(USERS, uid)
            balance = int((entry or {}).get("points") or 0)
            if entry is None or balance < cost:
                raise InsufficientPoints(f"至少需要 {cost} 积分才能发布兑换码", required=cost, available=balance)
            tx.increment(USERS, uid, {"points": -cost})
            return tx.add(CODES, document)

        code_id = await self.store.run_transaction(_tx)
        logger.info(f"🚀 兑换码已发布 id={code_id} code={fields['code']} uid={uid} cost={cost}")

        await self.bus.publish(EventName.USER_POINTS_CHANGED, {"uid": uid, "delta": -cost})
        await self._changed("published", code_id=code_id)
        return code_id

    # ==================================================
    # 🧭 管理员添加（不消耗积分）
    # ==================================================
    async def admin_add(self, draft: CodeDraft, session: SessionContext) -> str:
        session.require_admin()
        fields = self.validate_draft(draft, self._today(None))
        code_id = await self.store.add(CODES, self._new_document(fields, ADMIN_PUBLISHER))
        logger.info(f"🧭 管理员添加兑换码 id={code_id} code={fields['code']} by={session.email}")
        await self._changed("admin_added", code_id=code_id)
        return code_id

    # ==================================================
    # 📋 领取（复制）
    # ==================================================
    async def claim(self, code_id: str, session: SessionContext) -> Code:
        session.require_user()

        if self.enforce_max_claims:
            def _tx(tx):
                data = tx.get(CODES, code_id)
                if data is None:
                    raise NotFound("兑换码不存在")
                code = self._load(code_id, data)
                if code.is_fully_claimed:
                    raise FullyClaimedError()
                tx.increment(CODES, code_id, {"claimedCount": 1})
                return code.model_copy(update={"claimed_count": code.claimed_count + 1})

            code = await self.store.run_transaction(_tx)
        else:
            # 仅依赖原子自增，允许超领
            await self.store.increment(CODES, code_id, {"claimedCount": 1})
            code = await self.get(code_id)

        logger.info(f"📋 兑换码被领取 id={code_id} uid={session.uid} claimed={code.claimed_count}/{code.max_claims}")
        await self._changed("claimed", code_id=code_id)
        return code

    # ==================================================
    # 🗑️ 删除 / 🧹 清理过期
    # ==================================================
    async def remove(self, code_id: str, session: SessionContext) -> None:
        session.require_admin()
        await self.store.delete(CODES, code_id)
        logger.info(f"🗑️ 兑换码已删除 id={code_id} by={session.email}")
        await self._changed("removed", code_id=code_id)

    async def purge_expired(self, now: Optional[datetime | date] = None) -> int:
        today = self._today(now).isoformat()
        docs = await self.store.query(CODES, FieldFilter("expiryDate", "<", today))
        if not docs:
            return 0

        deleted = await self.store.delete_many(CODES, [d.key for d in docs])
        logger.info(f"🧹 已清理过期兑换码 {deleted} 个 (expiryDate < {today})")
        await self._changed("purged", count=deleted)
        return deleted
