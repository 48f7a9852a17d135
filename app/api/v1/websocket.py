"""WebSocket API endpoint for table-change notifications."""

import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from app.services.realtime_service import get_connection_manager
from app.utils.security import decode_access_token

logger = logging.getLogger(__name__)

router = APIRouter(tags=["websocket"])


@router.websocket("/ws/{token}")
async def websocket_endpoint(
    websocket: WebSocket,
    token: str,
    tables: str | None = Query(None),
):
    """
    WebSocket endpoint for table-change notifications.

    The token is passed in the URL path since browsers cannot set headers on
    WebSocket connections. `tables` is an optional comma-separated initial
    subscription; clients can send {"type": "subscribe", "tables": [...]} and
    {"type": "unsubscribe", "tables": [...]} afterwards.
    """
    payload = decode_access_token(token)
    if not payload or not payload.get("sub"):
        await websocket.close(code=4001, reason="Invalid or expired token")
        return

    user_id = payload["sub"]
    initial_tables = {t.strip() for t in tables.split(",") if t.strip()} if tables else set()

    manager = get_connection_manager()

    try:
        await manager.connect(websocket, user_id, initial_tables)

        await websocket.send_json({
            "type": "connected",
            "data": {
                "message": "WebSocket connection established",
                "user_id": user_id,
                "tables": sorted(initial_tables),
            },
        })

        while True:
            data = await websocket.receive_json()
            message_type = data.get("type")

            if message_type == "ping":
                await websocket.send_json({"type": "pong"})
            elif message_type == "subscribe":
                manager.subscribe(websocket, data.get("tables") or [])
            elif message_type == "unsubscribe":
                manager.unsubscribe(websocket, data.get("tables") or [])

    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected: {user_id}")
    except ValueError as e:
        # Non-JSON frame
        logger.debug(f"WebSocket receive error: {e}")
    finally:
        await manager.disconnect(websocket)
