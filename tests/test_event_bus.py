import asyncio

from avatar_chat.core.event_bus import EventBus


def test_sync_and_async_listeners():
    bus = EventBus()
    received = []

    async def async_listener(value):
        received.append(("async", value))

    bus.subscribe("ping", lambda value: received.append(("sync", value)))
    bus.subscribe("ping", async_listener)

    async def run():
        await bus.initialize()
        await bus.emit("ping", 1)

    asyncio.run(run())

    assert received == [("sync", 1), ("async", 1)]


def test_emit_before_initialize_is_ignored():
    bus = EventBus()
    received = []
    bus.subscribe("ping", received.append)

    asyncio.run(bus.emit("ping", 1))

    assert received == []


def test_failing_listener_does_not_stop_others():
    bus = EventBus()
    received = []

    def broken(value):
        raise ValueError("bad listener")

    bus.subscribe("ping", broken)
    bus.subscribe("ping", received.append)

    async def run():
        await bus.initialize()
        await bus.emit("ping", "ok")

    asyncio.run(run())

    assert received == ["ok"]


def test_unsubscribe_and_shutdown():
    bus = EventBus()
    received = []
    bus.subscribe("ping", received.append)

    async def run():
        await bus.initialize()
        bus.unsubscribe("ping", received.append)
        await bus.emit("ping", 1)
        bus.subscribe("ping", received.append)
        await bus.shutdown()
        await bus.emit("ping", 2)

    asyncio.run(run())

    assert received == []
    assert bus.running is False

