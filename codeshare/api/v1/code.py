"""
# @Time    : 2026/10/19
# @Author  : Pedro
# @File    : code.py
# @Software: PyCharm
"""
from fastapi import APIRouter, Depends

from codeshare.api.v1.schema.code import CodeDraft, CodeOut, CodeStats
from codeshare.api.v1.services import ServiceContainer
from codeshare.api.v1.services.session_service import SessionContext
from codeshare.core.auth import get_container, get_session
from codeshare.core.response import CodeShareResponse
from codeshare.core.result import run_operation

rp = APIRouter(prefix="/codes", tags=["兑换码"])


@rp.get("", name="有效兑换码列表")
async def list_active_codes(
        session: SessionContext = Depends(get_session),
        container: ServiceContainer = Depends(get_container),
):
    codes = await container.registry.list_active()
    # 未登录只展示打码后的兑换码
    masked = not session.is_authenticated
    return CodeShareResponse.success(data=[CodeOut.from_code(c, masked=masked) for c in codes])


@rp.get("/stats", name="兑换码统计")
async def code_stats(container: ServiceContainer = Depends(get_container)):
    stats = await container.registry.stats()
    return CodeShareResponse.success(data=CodeStats(**stats))


@rp.post("", name="发布兑换码")
async def publish_code(
        draft: CodeDraft,
        session: SessionContext = Depends(get_session),
        container: ServiceContainer = Depends(get_container),
):
    async def _do():
        code_id = await container.registry.publish(draft, session)
        return {"id": code_id}

    result = await run_operation(container.bus, _do(), "兑换码发布成功", uid=session.uid)
    return result.to_response()


@rp.post("/{code_id}/claim", name="领取（复制）兑换码")
async def claim_code(
        code_id: str,
        session: SessionContext = Depends(get_session),
        container: ServiceContainer = Depends(get_container),
):
    async def _do():
        code = await container.registry.claim(code_id, session)
        return CodeOut.from_code(code)

    result = await run_operation(
        container.bus, _do(), "兑换码已复制，请在 Binance App 中粘贴使用", uid=session.uid
    )
    return result.to_response()
