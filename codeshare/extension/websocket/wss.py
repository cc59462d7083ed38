import json
from typing import Dict, Optional

from fastapi import WebSocket
from loguru import logger


class WebSocketManager:
    """统一管理所有 WebSocket 连接（事件推送通道）"""

    def __init__(self):
        # { WebSocket: uid or None }
        self.clients: Dict[WebSocket, Optional[str]] = {}

    # ==========================================================
    # ✅ 连接管理
    # ==========================================================
    async def connect(self, ws: WebSocket, uid: Optional[str]):
        """注册连接（不在此 accept）"""
        self.clients[ws] = uid
        logger.debug(f"✅ Client[{uid or 'anonymous'}] connected. 当前连接数: {len(self.clients)}")

    async def disconnect(self, ws: WebSocket):
        uid = self.clients.pop(ws, None)
        logger.debug(f"🧹 Client[{uid or 'anonymous'}] disconnected")

    # ==========================================================
    # 📢 广播 / 点对点推送
    # ==========================================================
    async def broadcast_all(self, payload: dict):
        """广播给所有在线连接"""
        msg = json.dumps(payload, ensure_ascii=False)
        for ws in list(self.clients.keys()):
            try:
                await ws.send_text(msg)
            except Exception:
                await self.disconnect(ws)

    async def send_to_user(self, uid: str, payload: dict):
        """通过 uid 推送给特定用户"""
        for ws, client_uid in list(self.clients.items()):
            if client_uid == uid:
                try:
                    await ws.send_json(payload)
                except Exception:
                    await self.disconnect(ws)


# ✅ 单例
websocket_manager = WebSocketManager()
