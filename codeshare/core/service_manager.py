"""
CodeShare | 通用服务注册模块
------------------------------------
✅ 每个服务继承 BaseService，注册后统一启动
✅ 支持 FastAPI 生命周期自动启动与关闭
"""

from typing import Dict

from loguru import logger


class BaseService:
    """所有服务模块的基类"""
    name: str = "base"

    async def init(self):
        """初始化逻辑"""
        raise NotImplementedError

    async def close(self):
        """关闭逻辑"""
        pass


class ServiceManager:
    """统一的服务管理器"""

    def __init__(self):
        self._services: Dict[str, BaseService] = {}

    def register(self, instance: BaseService) -> BaseService:
        self._services[instance.name] = instance
        return instance

    # ======================================================
    # 初始化加载
    # ======================================================
    async def init_all(self):
        for name, instance in self._services.items():
            try:
                await instance.init()
                logger.info(f"✅ 已加载服务: {name}")
            except Exception as e:
                logger.error(f"⚠️ 加载服务失败: {name}, 原因: {e}")

    # ======================================================
    # 关闭所有服务
    # ======================================================
    async def close_all(self):
        """关闭所有服务"""
        for name, service in self._services.items():
            try:
                await service.close()
                logger.info(f"🛑 已关闭服务: {name}")
            except Exception as e:
                logger.error(f"⚠️ 关闭服务 {name} 失败: {e}")
