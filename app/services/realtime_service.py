"""Table-change notifications over WebSocket, with Redis pub/sub for multi-instance support."""

import asyncio
import json
import logging
import uuid
from typing import Any

from fastapi import WebSocket

from app.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

CHANNEL_PREFIX = "changes:"


def table_changed_event(table: str, action: str, row_id: uuid.UUID | str | None) -> dict[str, Any]:
    """Build the event sent to subscribers when rows of a table change."""
    return {
        "type": "table_changed",
        "table": table,
        "action": action,
        "id": str(row_id) if row_id is not None else None,
    }


class ConnectionManager:
    """
    Manages WebSocket subscribers to table-change events.

    A connection opened without tables follows every table; otherwise it
    follows exactly its table set, which may become empty. Without Redis,
    events are delivered in-process; with Redis they are published on
    "changes:{table}" and every instance delivers them to its own subscribers.
    """

    def __init__(self):
        # {websocket: {"user_id": str, "all_tables": bool, "tables": set[str]}}
        self.active_connections: dict[WebSocket, dict[str, Any]] = {}
        self._redis = None
        self._pubsub_task = None

    async def _get_redis(self):
        """Get or create Redis client."""
        if self._redis is None and settings.redis_available:
            try:
                import redis.asyncio as aioredis
                self._redis = aioredis.from_url(
                    settings.redis_url,
                    encoding="utf-8",
                    decode_responses=True,
                )
                self._pubsub_task = asyncio.create_task(self._listen_pubsub())
            except Exception as e:
                logger.warning(f"Redis connection failed, running without pub/sub: {e}")
                self._redis = None
        return self._redis

    async def _listen_pubsub(self):
        """Listen for change events and deliver them to local subscribers."""
        if not self._redis:
            return

        pubsub = self._redis.pubsub()
        try:
            await pubsub.psubscribe(f"{CHANNEL_PREFIX}*")

            async for message in pubsub.listen():
                if message["type"] == "pmessage":
                    await self._deliver_local(json.loads(message["data"]))
        except Exception as e:
            logger.error(f"Pub/sub listener error: {e}")
        finally:
            await pubsub.close()

    def _is_subscribed(self, websocket: WebSocket, table: str) -> bool:
        info = self.active_connections.get(websocket)
        if info is None:
            return False
        return info["all_tables"] or table in info["tables"]

    async def _deliver_local(self, event: dict[str, Any]):
        """Deliver an event to local connections subscribed to its table."""
        table = event.get("table", "")
        for ws in list(self.active_connections):
            if not self._is_subscribed(ws, table):
                continue
            try:
                await ws.send_json(event)
            except Exception as e:
                logger.debug(f"Failed to send to websocket: {e}")

    async def connect(self, websocket: WebSocket, user_id: str, tables: set[str] | None = None):
        """Accept and register a new WebSocket connection."""
        await websocket.accept()
        self.active_connections[websocket] = {
            "user_id": user_id,
            "all_tables": not tables,
            "tables": set(tables or ()),
        }
        logger.info(f"WebSocket connected: {user_id}")

        await self._get_redis()

    async def disconnect(self, websocket: WebSocket):
        """Remove a WebSocket connection."""
        info = self.active_connections.pop(websocket, None)
        if info:
            logger.info(f"WebSocket disconnected: {info['user_id']}")

    def subscribe(self, websocket: WebSocket, tables: list[str]):
        """Add tables to a connection's subscription."""
        if websocket in self.active_connections and tables:
            info = self.active_connections[websocket]
            # An explicit subscription replaces the follow-everything default
            info["all_tables"] = False
            info["tables"].update(tables)

    def unsubscribe(self, websocket: WebSocket, tables: list[str]):
        """Remove tables from a connection's subscription."""
        if websocket in self.active_connections:
            self.active_connections[websocket]["tables"].difference_update(tables)

    async def notify_change(
        self,
        table: str,
        action: str,
        row_id: uuid.UUID | str | None = None,
    ):
        """Publish a table-change event. Call only after the write is committed."""
        event = table_changed_event(table, action, row_id)

        redis = await self._get_redis()
        if redis:
            try:
                await redis.publish(f"{CHANNEL_PREFIX}{table}", json.dumps(event))
                return
            except Exception as e:
                logger.warning(f"Redis publish failed, falling back to local: {e}")

        await self._deliver_local(event)


# Singleton instance
_connection_manager: ConnectionManager | None = None


def get_connection_manager() -> ConnectionManager:
    """Get the connection manager singleton."""
    global _connection_manager
    if _connection_manager is None:
        _connection_manager = ConnectionManager()
    return _connection_manager
