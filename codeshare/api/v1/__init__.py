import importlib
import pkgutil
import time

from fastapi import APIRouter
from loguru import logger


def create_v1() -> APIRouter:
    """
    自动扫描 codeshare.api.v1 下所有包含 rp 对象的模块，并注册到 router_v1
    """
    router_v1 = APIRouter(prefix="/v1")

    package_name = "codeshare.api.v1"
    package = importlib.import_module(package_name)

    start_time = time.time()
    skip_modules = {"__init__", "model", "schema", "services"}

    for _, module_name, is_pkg in pkgutil.iter_modules(package.__path__):
        if is_pkg or module_name in skip_modules:
            continue

        module = importlib.import_module(f"{package_name}.{module_name}")
        rp = getattr(module, "rp", None)
        if rp:
            router_v1.include_router(rp)
            logger.debug(f"✅ 已注册子模块: {module_name:<12} | prefix={rp.prefix or '/'} | routes={len(rp.routes)}")
        else:
            logger.warning(f"⚠️ 模块 {module_name:<12} 未定义 rp 对象，已跳过。")

    elapsed = (time.time() - start_time) * 1000
    logger.info(f"🌿 v1 子模块注册完成！耗时 {elapsed:.2f} ms")
    return router_v1
