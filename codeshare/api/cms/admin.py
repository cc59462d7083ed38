# -*- coding: utf-8 -*-
"""
CodeShare 管理员模块
---------------------------------------------
✅ 全部兑换码（含过期）
✅ 添加 / 删除兑换码
✅ 发布公告
✅ 手动清理过期兑换码
"""
from fastapi import APIRouter, Depends

from codeshare.api.v1.schema.code import CodeDraft, CodeOut, PurgeResult
from codeshare.api.v1.schema.user import UpdateIn
from codeshare.api.v1.services import ServiceContainer
from codeshare.api.v1.services.session_service import SessionContext
from codeshare.core.auth import get_container, get_session
from codeshare.core.response import CodeShareResponse
from codeshare.core.result import run_operation

rp = APIRouter(tags=["管理员"])


@rp.get("/codes", name="全部兑换码")
async def list_all_codes(
        session: SessionContext = Depends(get_session),
        container: ServiceContainer = Depends(get_container),
):
    codes = await container.registry.list_all(session)
    return CodeShareResponse.success(data=[CodeOut.from_code(c) for c in codes])


@rp.post("/codes", name="管理员添加兑换码")
async def admin_add_code(
        draft: CodeDraft,
        session: SessionContext = Depends(get_session),
        container: ServiceContainer = Depends(get_container),
):
    async def _do():
        return {"id": await container.registry.admin_add(draft, session)}

    result = await run_operation(container.bus, _do(), "管理员已添加兑换码", uid=session.uid)
    return result.to_response()


@rp.delete("/codes/{code_id}", name="删除兑换码")
async def delete_code(
        code_id: str,
        session: SessionContext = Depends(get_session),
        container: ServiceContainer = Depends(get_container),
):
    result = await run_operation(
        container.bus, container.registry.remove(code_id, session), "兑换码已删除", uid=session.uid
    )
    return result.to_response()


@rp.post("/updates", name="发布公告")
async def post_update(
        body: UpdateIn,
        session: SessionContext = Depends(get_session),
        container: ServiceContainer = Depends(get_container),
):
    async def _do():
        return {"id": await container.updates.post(body.text, session)}

    result = await run_operation(container.bus, _do(), "公告发布成功", uid=session.uid)
    return result.to_response()


@rp.post("/codes/purge", name="清理过期兑换码")
async def purge_expired_codes(
        session: SessionContext = Depends(get_session),
        container: ServiceContainer = Depends(get_container),
):
    async def _do():
        session.require_admin()
        return PurgeResult(deleted=await container.registry.purge_expired())

    result = await run_operation(container.bus, _do(), "过期兑换码已清理", uid=session.uid)
    return result.to_response()
