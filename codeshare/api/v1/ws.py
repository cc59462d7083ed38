from typing import Optional

from fastapi import APIRouter, WebSocket, status
from loguru import logger
from starlette.websockets import WebSocketDisconnect

from codeshare.core.exception import APIException, AuthError
from codeshare.extension.websocket.wss import websocket_manager

rp = APIRouter(prefix="/ws", tags=["WebSocket"])


@rp.websocket("/events")
async def ws_events(ws: WebSocket, token: Optional[str] = None):
    """展示层事件订阅：code-list-changed 广播，其余按 uid 推送"""
    container = ws.app.state.container
    try:
        session = await container.sessions.resume(token)
    except APIException as e:
        # token 无效 → 1008；认证服务不可用 → 1011
        code = status.WS_1008_POLICY_VIOLATION if isinstance(e, AuthError) else status.WS_1011_INTERNAL_ERROR
        logger.debug(f"⚠️ WebSocket 握手拒绝 kind={e.kind.value}")
        await ws.close(code=code)
        return

    await ws.accept()
    await websocket_manager.connect(ws, session.uid)
    try:
        while True:
            msg = await ws.receive_text()
            if msg == "ping":
                await ws.send_json({"type": "pong"})
    except WebSocketDisconnect:
        logger.debug("⚠️ WebSocket client disconnected")
    finally:
        await websocket_manager.disconnect(ws)
