"""
API 注册入口
"""
from fastapi import FastAPI
from loguru import logger

from codeshare.api.cms import create_cms
from codeshare.api.v1 import create_v1


def register_blueprint(app: FastAPI):
    app.include_router(create_v1())
    app.include_router(create_cms())
    logger.info("✅ 已注册 API 模块: v1 / cms")
