# /tests/test_realtime.py

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.services import realtime_service
from app.services.realtime_service import ConnectionManager, table_changed_event


def _websocket():
    websocket = MagicMock()
    websocket.accept = AsyncMock()
    websocket.send_json = AsyncMock()
    return websocket


@pytest.fixture
def manager():
    """A manager without Redis, so events are delivered in-process."""
    with patch.object(realtime_service.settings, "redis_url", None):
        yield ConnectionManager()


async def test_connection_without_tables_follows_everything(manager):
    websocket = _websocket()
    await manager.connect(websocket, "user-1")

    await manager.notify_change("expenses", "insert", "row-1")

    websocket.send_json.assert_awaited_once_with(table_changed_event("expenses", "insert", "row-1"))


async def test_connection_only_receives_its_tables(manager):
    websocket = _websocket()
    await manager.connect(websocket, "user-1", {"payments"})

    await manager.notify_change("expenses", "insert", "row-1")
    await manager.notify_change("payments", "update", "row-2")

    assert websocket.send_json.await_count == 1
    assert websocket.send_json.await_args.args[0]["table"] == "payments"


async def test_unsubscribing_every_table_silences_the_connection(manager):
    """Emptying an explicit subscription must not fall back to every table."""
    websocket = _websocket()
    await manager.connect(websocket, "user-1", {"payments"})

    manager.unsubscribe(websocket, ["payments"])
    await manager.notify_change("expenses", "insert", "row-1")
    await manager.notify_change("payments", "insert", "row-2")

    websocket.send_json.assert_not_awaited()


async def test_subscribe_narrows_a_follow_everything_connection(manager):
    websocket = _websocket()
    await manager.connect(websocket, "user-1")

    manager.subscribe(websocket, ["attendance_records"])
    manager.subscribe(websocket, [])
    await manager.notify_change("payments", "insert", "row-1")
    await manager.notify_change("attendance_records", "insert", "row-2")

    assert websocket.send_json.await_count == 1
    assert websocket.send_json.await_args.args[0]["table"] == "attendance_records"


async def test_disconnected_socket_gets_nothing(manager):
    websocket = _websocket()
    await manager.connect(websocket, "user-1")
    await manager.disconnect(websocket)

    await manager.notify_change("payments", "insert", "row-1")

    websocket.send_json.assert_not_awaited()
