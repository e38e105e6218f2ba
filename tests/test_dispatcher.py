from __future__ import annotations

import asyncio

from sync_server.app import create_app
from sync_server.core import ConnectionContext
from sync_shared.protocol import MsgType
from sync_shared.protocol.constants import MIB


def _wiring():
    state = create_app().state
    return state.store, state.connection_manager, state.dispatcher


def _connect(manager) -> ConnectionContext:
    ctx = ConnectionContext(websocket=None, peername="test", outbox=asyncio.Queue(maxsize=512))
    manager.register(ctx)
    _drain(ctx)
    return ctx


def _drain(ctx: ConnectionContext) -> list:
    events = []
    while not ctx.outbox.empty():
        events.append(ctx.outbox.get_nowait())
    return events


def _commands(ctx: ConnectionContext) -> list:
    return [event["command"] for event in _drain(ctx)]


def _run(dispatcher, ctx, command, payload=None):
    return asyncio.run(dispatcher.process({"command": command, "payload": payload}, ctx))


def test_chat_message_is_echoed_to_everyone_including_sender():
    store, manager, dispatcher = _wiring()
    client1, client2 = _connect(manager), _connect(manager)

    _run(dispatcher, client1, "chat:message", {"id": "c1", "name": "alice", "text": "hi", "timestamp": 10})

    (to_sender,) = _drain(client1)
    (to_other,) = _drain(client2)
    assert to_sender == to_other
    assert to_sender["command"] == MsgType.CHAT_MESSAGE.value
    assert to_sender["payload"]["name"] == "alice"
    assert to_sender["payload"]["text"] == "hi"
    assert to_sender["payload"]["clientId"] == "c1"
    assert store.messages_tail()[-1] == to_sender["payload"]


def test_blank_chat_text_is_dropped():
    store, manager, dispatcher = _wiring()
    client = _connect(manager)

    assert _run(dispatcher, client, "chat:message", {"name": "alice", "text": "   \n"}) is None

    assert _drain(client) == []
    assert store.counts()["messages"] == 0


def test_oversized_noise_is_dropped_silently():
    store, manager, dispatcher = _wiring()
    client1, client2 = _connect(manager), _connect(manager)
    _run(dispatcher, client1, "noise:add", {"name": "alice", "data": "ok"})
    _drain(client1)
    _drain(client2)
    before = store.sounds_tail()

    _run(dispatcher, client1, "noise:add", {"name": "alice", "data": "x" * (2 * MIB)})

    assert _drain(client1) == []
    assert _drain(client2) == []
    assert store.sounds_tail() == before


def test_noise_is_echoed_to_everyone_including_sender():
    store, manager, dispatcher = _wiring()
    client1, client2 = _connect(manager), _connect(manager)

    _run(dispatcher, client1, "noise:add", {"id": 7, "name": "bob", "data": "data:audio/webm;base64,AAAA"})

    assert _commands(client1) == ["noise:add"]
    assert _commands(client2) == ["noise:add"]
    assert store.sounds_tail()[-1]["name"] == "bob"


def test_canvas_update_skips_its_originator():
    store, manager, dispatcher = _wiring()
    client1, client2 = _connect(manager), _connect(manager)

    _run(dispatcher, client1, "canvas:update", {"data": "P"})

    assert _drain(client1) == []
    (event,) = _drain(client2)
    assert event["command"] == "canvas:update"
    assert event["payload"] == {"data": "P"}
    assert store.canvas == "P"


def test_canvas_clear_reaches_its_originator():
    store, manager, dispatcher = _wiring()
    client1, client2 = _connect(manager), _connect(manager)
    _run(dispatcher, client2, "canvas:update", {"data": "P"})
    _drain(client1)

    _run(dispatcher, client1, "canvas:clear")

    assert _commands(client1) == ["canvas:clear"]
    assert _commands(client2) == ["canvas:clear"]
    assert store.canvas is None


def test_canvas_update_without_data_is_dropped():
    store, manager, dispatcher = _wiring()
    client1, client2 = _connect(manager), _connect(manager)

    _run(dispatcher, client1, "canvas:update", {})

    assert _drain(client2) == []
    assert store.canvas is None


def test_unknown_command_is_dropped():
    _, manager, dispatcher = _wiring()
    client = _connect(manager)
    assert _run(dispatcher, client, "canvas:undo", {}) is None
    assert _drain(client) == []


def test_worker_applies_events_in_arrival_order():
    store, manager, dispatcher = _wiring()
    client1, client2 = _connect(manager), _connect(manager)

    async def scenario():
        dispatcher.start()
        try:
            for i in range(20):
                sender = client1 if i % 2 else client2
                dispatcher.submit({"command": "chat:message", "payload": {"name": "n", "text": f"m{i}"}}, sender)
            dispatcher.submit({"command": "chat:message", "payload": {"text": ""}}, client1)
            dispatcher.submit({"command": "canvas:clear"}, client2)
            await dispatcher.drain()
        finally:
            await dispatcher.stop()

    asyncio.run(scenario())

    expected = [f"m{i}" for i in range(20)]
    for client in (client1, client2):
        events = _drain(client)
        assert [e["payload"]["text"] for e in events[:-1]] == expected
        assert events[-1]["command"] == "canvas:clear"
    assert [m["text"] for m in store.messages_tail()] == expected
    assert dispatcher.running is False


def test_hundred_and_one_messages_leave_fifty_in_the_tail():
    store, manager, dispatcher = _wiring()
    client = _connect(manager)
    for i in range(101):
        _run(dispatcher, client, "chat:message", {"name": "alice", "text": f"m{i}"})

    tail = store.snapshot().messages
    assert len(tail) == 50
    assert [m["text"] for m in tail] == [f"m{i}" for i in range(51, 101)]
    assert store.counts()["messages"] == 100


def test_worker_can_be_restarted_with_a_fresh_queue():
    store, manager, dispatcher = _wiring()
    client = _connect(manager)

    async def scenario():
        for text in ("first", "second"):
            dispatcher.start()
            dispatcher.submit({"command": "chat:message", "payload": {"name": "n", "text": text}}, client)
            await dispatcher.drain()
            await dispatcher.stop()

    asyncio.run(scenario())

    assert [m["text"] for m in store.messages_tail()] == ["first", "second"]
    assert dispatcher.running is False
