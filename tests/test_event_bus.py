from __future__ import annotations

from fleetlink.events import EventBus


def test_subscribers_called_in_registration_order() -> None:
    bus: EventBus[[int]] = EventBus()
    seen: list[tuple[str, int]] = []

    bus.subscribe(lambda value: seen.append(("first", value)))
    bus.subscribe(lambda value: seen.append(("second", value)))
    bus.emit(7)

    assert seen == [("first", 7), ("second", 7)]


def test_same_callback_registered_twice_is_called_twice() -> None:
    bus: EventBus[[int]] = EventBus()
    seen: list[int] = []

    unsubscribe_one = bus.subscribe(seen.append)
    bus.subscribe(seen.append)
    bus.emit(1)
    assert seen == [1, 1]

    # Removing one registration leaves the other in place.
    unsubscribe_one()
    bus.emit(2)
    assert seen == [1, 1, 2]


def test_double_unsubscribe_is_noop() -> None:
    bus: EventBus[[str]] = EventBus()
    seen: list[str] = []
    unsubscribe = bus.subscribe(seen.append)

    unsubscribe()
    unsubscribe()
    bus.emit("ignored")

    assert seen == []
    assert len(bus) == 0


def test_failing_subscriber_does_not_block_others() -> None:
    bus: EventBus[[str]] = EventBus("test")
    seen: list[str] = []

    def _boom(_value: str) -> None:
        raise RuntimeError("subscriber bug")

    bus.subscribe(_boom)
    bus.subscribe(seen.append)
    bus.emit("hello")

    assert seen == ["hello"]


def test_unsubscribe_during_emit_is_safe() -> None:
    bus: EventBus[[int]] = EventBus()
    seen: list[int] = []
    unsubscribers: list = []

    def _once(value: int) -> None:
        seen.append(value)
        unsubscribers[0]()

    unsubscribers.append(bus.subscribe(_once))
    bus.emit(1)
    bus.emit(2)

    assert seen == [1]
