"""
# @Time    : 2026/10/19
# @Author  : Pedro
# @File    : base.py
# @Software: PyCharm
"""
from typing import Dict, Any, List, Callable, Awaitable

from loguru import logger

from codeshare.core.enums import EventName

Handler = Callable[[Dict[str, Any]], Awaitable[None]]


class EventBus:
    """通用异步事件总线"""
    def __init__(self):
        self.subscribers: Dict[str, List[Handler]] = {}
        self.adapters = []

    def register_adapter(self, adapter):
        """注册适配器（WebSocket 等）"""
        if adapter not in self.adapters:
            self.adapters.append(adapter)

    def on(self, event_name: EventName | str):
        """注册本地事件监听器"""
        key = getattr(event_name, "value", event_name)

        def wrapper(func):
            self.subscribers.setdefault(key, []).append(func)
            return func
        return wrapper

    def subscribe(self, event_name: EventName | str, func: Handler):
        self.on(event_name)(func)

    def unsubscribe(self, event_name: EventName | str, func: Handler):
        key = getattr(event_name, "value", event_name)
        handlers = self.subscribers.get(key, [])
        if func in handlers:
            handlers.remove(func)

    async def publish(self, event_name: EventName | str, data: Dict[str, Any] | None = None):
        """发布事件（多通道分发），监听器异常只记录不外抛"""
        key = getattr(event_name, "value", event_name)
        data = data or {}
        payload = {"event": key, "data": data}

        # ✅ 广播到所有适配器
        for adapter in self.adapters:
            try:
                await adapter.publish(key, payload)
            except Exception as e:
                logger.warning(f"⚠️ Adapter {adapter.__class__.__name__} error: {e}")

        # ✅ 调用本地监听器
        for fn in list(self.subscribers.get(key, [])):
            try:
                await fn(data)
            except Exception as e:
                logger.warning(f"⚠️ Local handler error ({key}): {e}")

