from fastapi import APIRouter

from codeshare.api.cms.admin import rp as admin_rp


def create_cms() -> APIRouter:
    router_cms = APIRouter(prefix="/cms")
    router_cms.include_router(admin_rp)
    return router_cms
