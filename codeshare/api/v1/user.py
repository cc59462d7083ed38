"""
# @Time    : 2026/10/19
# @Author  : Pedro
# @File    : user.py
# @Software: PyCharm
"""
from fastapi import APIRouter, Depends

from codeshare.api.v1.schema.user import PointsOut
from codeshare.api.v1.services import ServiceContainer
from codeshare.api.v1.services.session_service import SessionContext
from codeshare.core.auth import get_container, get_session, login_required
from codeshare.core.response import CodeShareResponse
from codeshare.core.result import run_operation

rp = APIRouter(prefix="/user", tags=["用户"])


@rp.get("/points", name="我的积分")
async def my_points(
        session: SessionContext = Depends(login_required),
        container: ServiceContainer = Depends(get_container),
):
    ledger = container.ledger
    points = await ledger.get_points(session.uid)
    return CodeShareResponse.success(data=PointsOut(
        uid=session.uid,
        points=points,
        can_publish=points >= ledger.publish_cost,
        publish_cost=ledger.publish_cost,
    ))


@rp.post("/watch-ad", name="看广告赚积分")
async def watch_ad(
        session: SessionContext = Depends(get_session),
        container: ServiceContainer = Depends(get_container),
):
    async def _do():
        uid = session.require_user().uid
        reward = await container.ledger.watch_ad(uid)
        return {"reward": reward, "points": await container.ledger.get_points(uid)}

    reward = container.ledger.ad_reward
    result = await run_operation(container.bus, _do(), f"+{reward} 积分已到账！多看广告赚更多积分", uid=session.uid)
    return result.to_response()
