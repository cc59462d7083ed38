# -*- coding: utf-8 -*-
"""
FastAPI 应用初始化入口 (CodeShare)
--------------------------------------------
✅ lifespan 模式
✅ 模块自动注册 (v1 / cms)
✅ 日志 / CORS / 异常 / 配置加载
✅ 业务服务装配 + 后台服务（过期清理 / WebSocket 事件推送）
"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from loguru import logger

from codeshare.config.settings_manager import get_current_settings


# ======================================================
# 🧱 注册模块与服务
# ======================================================
def register_blueprints(app: FastAPI):
    """注册 API 模块"""
    from codeshare.api import register_blueprint
    register_blueprint(app)


def register_cors(app: FastAPI):
    """注册 CORS 中间件"""
    from fastapi.middleware.cors import CORSMiddleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    logger.info("✅ CORS 中间件已启用")


def register_exception_handlers(app: FastAPI):
    """注册全局异常"""
    from codeshare.core.exception import register_exception_handlers
    register_exception_handlers(app)
    logger.info("✅ 异常处理器已注册")


def register_logger(app: FastAPI):
    """统一日志系统"""
    from codeshare.core.logger import setup_logger
    setup_logger(app)


# ======================================================
# 🧬 lifespan 生命周期管理器
# ======================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """统一管理 startup / shutdown"""
    container = app.state.container

    logger.info("🚀 FastAPI 启动中，正在初始化后台服务...")
    await container.services.init_all()
    logger.info("✅ 所有模块初始化完成，系统启动成功。")

    yield

    logger.info("🧹 FastAPI 正在关闭中，清理资源...")
    await container.close()


# ======================================================
# 🏗️ 应用工厂
# ======================================================
def create_app(container=None, *, settings=None, init_logging: Optional[bool] = None) -> FastAPI:
    """构建 FastAPI 实例并注册所有依赖"""
    from codeshare.api.v1.services import build_container
    from codeshare.core.config import init_settings

    settings = settings or get_current_settings()
    docs_url = "/docs" if settings.app.debug else None

    app = FastAPI(
        docs_url=docs_url,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.app.debug else None,
        title=settings.app.name,
        version=settings.app.version,
        description="CodeShare promo code community API",
        debug=settings.app.debug,
        lifespan=lifespan,
    )
    init_settings(app)
    app.state.container = container or build_container(settings)

    register_cors(app)
    if init_logging is None:
        init_logging = container is None
    if init_logging:
        register_logger(app)
    register_blueprints(app)
    register_exception_handlers(app)

    logger.info(f"✅ CodeShare FastAPI 初始化完成 | 环境: {settings.app.env} | store={app.state.container.store.name}")
    return app
