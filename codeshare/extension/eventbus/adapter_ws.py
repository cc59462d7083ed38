"""
# @Time    : 2026/10/19
# @Author  : Pedro
# @File    : adapter_ws.py
# @Software: PyCharm
"""
from loguru import logger

from codeshare.core.enums import EventName
from codeshare.core.service_manager import BaseService
from codeshare.extension.websocket.wss import WebSocketManager, websocket_manager

# 所有人都需要重新拉取的事件
BROADCAST_EVENTS = {EventName.CODE_LIST_CHANGED.value}


class WebSocketAdapter(BaseService):
    name = "websocket"

    def __init__(self, bus, manager: WebSocketManager = websocket_manager):
        self.bus = bus
        self.manager = manager
        self.ready = False

    async def init(self):
        self.bus.register_adapter(self)
        self.ready = True
        logger.info("✅ WebSocketAdapter 初始化完成")

    async def close(self):
        self.ready = False
        logger.info("🛑 WebSocketAdapter 关闭")

    async def publish(self, event_name, payload):
        # 如果服务未ready，防止运行报错
        if not self.ready:
            return

        if event_name in BROADCAST_EVENTS:
            await self.manager.broadcast_all(payload)
            return

        uid = (payload.get("data") or {}).get("uid")
        if uid:
            await self.manager.send_to_user(uid, payload)
