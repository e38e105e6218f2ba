from __future__ import annotations

import asyncio

from sync_server.core import CommandRouter, ConnectionContext, ConnectionManager, SocketServer
from sync_server.storage import SharedStateStore
from sync_server.workers import EventDispatcher
from sync_shared.protocol import MsgType, decode_msg, make_event


def _ctx(outbox_size: int = 16) -> ConnectionContext:
    return ConnectionContext(websocket=None, peername="test", outbox=asyncio.Queue(maxsize=outbox_size))


def _drain(ctx: ConnectionContext) -> list:
    events = []
    while not ctx.outbox.empty():
        events.append(ctx.outbox.get_nowait())
    return events


def test_register_hydrates_only_the_new_connection():
    store = SharedStateStore()
    manager = ConnectionManager(store)
    first = _ctx()
    manager.register(first)
    _drain(first)

    store.append_message("alice", "hi")
    second = _ctx()
    connection_id = manager.register(second)

    assert connection_id == second.connection_id
    assert manager.count() == 2
    assert _drain(first) == []
    (init,) = _drain(second)
    assert init["command"] == MsgType.INIT.value
    assert init["payload"] == store.snapshot().to_init_payload()


def test_each_hydration_matches_the_snapshot_at_its_own_registration():
    store = SharedStateStore()
    manager = ConnectionManager(store)

    early = _ctx()
    manager.register(early)
    expected_early = store.snapshot().to_init_payload()

    store.append_message("alice", "one")
    store.set_canvas("P")

    late = _ctx()
    manager.register(late)
    expected_late = store.snapshot().to_init_payload()

    assert _drain(early)[0]["payload"] == expected_early
    assert _drain(late)[0]["payload"] == expected_late
    assert expected_early != expected_late


def test_unregister_is_idempotent():
    manager = ConnectionManager(SharedStateStore())
    ctx = _ctx()
    manager.register(ctx)

    assert manager.unregister(ctx.connection_id) is ctx
    assert ctx.closed is True
    assert manager.unregister(ctx.connection_id) is None
    assert manager.unregister("never-registered") is None
    assert manager.count() == 0


def test_broadcast_honours_exclusions():
    manager = ConnectionManager(SharedStateStore())
    a, b, c = _ctx(), _ctx(), _ctx()
    for ctx in (a, b, c):
        manager.register(ctx)
        _drain(ctx)

    event = make_event(MsgType.CANVAS_UPDATE, {"data": "P"})
    delivered = manager.broadcast(event, exclude={a.connection_id})

    assert delivered == 2
    assert _drain(a) == []
    assert _drain(b) == [event]
    assert _drain(c) == [event]


def test_slow_consumer_is_dropped_without_affecting_others():
    manager = ConnectionManager(SharedStateStore())
    slow = _ctx(outbox_size=1)  # init already fills it
    healthy = _ctx()
    manager.register(slow)
    manager.register(healthy)
    _drain(healthy)

    event = make_event(MsgType.CANVAS_CLEAR)
    delivered = manager.broadcast(event)

    assert delivered == 1
    assert manager.count() == 1
    assert slow.closed is True
    assert _drain(healthy) == [event]

    # later broadcasts skip the dropped connection entirely
    assert manager.broadcast(event) == 1




def test_broadcast_skips_and_unregisters_a_closed_connection():
    manager = ConnectionManager(SharedStateStore())
    stale, live = _ctx(), _ctx()
    manager.register(stale)
    manager.register(live)
    _drain(stale)
    _drain(live)
    stale.closed = True

    event = make_event(MsgType.CANVAS_CLEAR)

    assert manager.broadcast(event) == 1
    assert manager.count() == 1
    assert _drain(stale) == []
    assert _drain(live) == [event]


class _RecordingSocket:
    def __init__(self) -> None:
        self.sent = []

    async def send_text(self, data: str) -> None:
        self.sent.append(data)


class _BrokenSocket:
    async def send_text(self, data: str) -> None:
        raise ConnectionResetError("peer went away")


def test_failed_send_unregisters_only_the_broken_connection():
    manager = ConnectionManager(SharedStateStore())
    server = SocketServer(manager, EventDispatcher(CommandRouter()))
    good_socket = _RecordingSocket()
    good = ConnectionContext(websocket=good_socket, peername="good", outbox=asyncio.Queue(maxsize=16))
    bad = ConnectionContext(websocket=_BrokenSocket(), peername="bad", outbox=asyncio.Queue(maxsize=16))
    event = make_event(MsgType.CANVAS_UPDATE, {"data": "P"})

    async def scenario():
        for ctx in (good, bad):
            manager.register(ctx)
            ctx.sender_task = asyncio.create_task(server._pump(ctx))
        manager.broadcast(event)
        await bad.sender_task
        await good.outbox.join()
        good.sender_task.cancel()
        await asyncio.gather(good.sender_task, return_exceptions=True)

    asyncio.run(scenario())

    assert bad.closed is True
    assert good.closed is False
    assert manager.count() == 1
    assert [decode_msg(frame)["command"] for frame in good_socket.sent] == ["init", "canvas:update"]
    assert decode_msg(good_socket.sent[-1])["payload"] == {"data": "P"}
