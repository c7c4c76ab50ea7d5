from __future__ import annotations

import asyncio

import pytest

from presence_chat.domain.value_objects.chat_user import ChatUser
from presence_chat.services.connection_registry import ConnectionRegistry
from tests.conftest import FakeTransport, received

ALICE = ChatUser(id="u1", name="Alice")


def test_register_returns_distinct_handles(registry):
    h1 = registry.register(FakeTransport())
    h2 = registry.register(FakeTransport())

    assert h1 != h2
    assert len(registry) == 2
    assert registry.bound_user(h1) is None


def test_unregister_reports_binding_and_clean_leave(registry):
    handle = registry.register(FakeTransport())
    registry.bind(handle, ALICE)

    assert registry.unregister(handle) == (ALICE, False)
    assert len(registry) == 0


def test_unregister_after_mark_left_cleanly(registry):
    handle = registry.register(FakeTransport())
    registry.bind(handle, ALICE)
    registry.mark_left_cleanly(handle)

    assert registry.unregister(handle) == (ALICE, True)


def test_unregister_unknown_handle(registry):
    assert registry.unregister("nope") == (None, True)


def test_rebind_last_write_wins_and_resets_left_flag(registry):
    handle = registry.register(FakeTransport())
    registry.bind(handle, ALICE)
    registry.mark_left_cleanly(handle)

    bob = ChatUser(id="u2", name="Bob")
    registry.bind(handle, bob)

    assert registry.unregister(handle) == (bob, False)


def test_broadcast_skips_closed_connections(registry):
    open_handle = registry.register(FakeTransport())
    closed_handle = registry.register(FakeTransport(sendable=False))

    delivered = registry.broadcast('{"type":"ping"}')

    assert delivered == 1
    assert received(registry.get(open_handle)) == [{"type": "ping"}]
    assert received(registry.get(closed_handle)) == []


def test_full_queue_drops_for_that_connection_only():
    registry = ConnectionRegistry(queue_size=1)
    slow = registry.register(FakeTransport())
    fast = registry.register(FakeTransport())

    registry.broadcast('{"n":1}')
    received(registry.get(fast))
    delivered = registry.broadcast('{"n":2}')

    assert delivered == 1
    assert received(registry.get(slow)) == [{"n": 1}]
    assert received(registry.get(fast)) == [{"n": 2}]


@pytest.mark.asyncio
async def test_sender_survives_send_failures(registry):
    broken = FakeTransport(fail=True)
    healthy = FakeTransport()
    broken_conn = registry.get(registry.register(broken))
    healthy_conn = registry.get(registry.register(healthy))

    tasks = [
        asyncio.create_task(broken_conn.run_sender()),
        asyncio.create_task(healthy_conn.run_sender()),
    ]
    try:
        registry.broadcast("one")
        registry.broadcast("two")
        await asyncio.wait_for(broken_conn._send_queue.join(), timeout=1)
        await asyncio.wait_for(healthy_conn._send_queue.join(), timeout=1)
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    assert healthy.sent == ["one", "two"]
    assert broken.sent == []
