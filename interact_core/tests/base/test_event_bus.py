"""EventBus delivery, ordering and handler failure isolation."""

from __future__ import annotations

from interact_core.base.events import EventBus, channels


def test_publish_delivers_in_subscription_order():
    bus = EventBus()
    seen = []
    bus.subscribe(channels.NEW_MESSAGE, lambda p: seen.append(("a", p)))
    bus.subscribe(channels.NEW_MESSAGE, lambda p: seen.append(("b", p)))

    assert bus.publish(channels.NEW_MESSAGE, 1) == 2  # nosec B101
    assert seen == [("a", 1), ("b", 1)]  # nosec B101


def test_failing_handler_does_not_block_others():
    bus = EventBus()
    seen = []

    def broken(_payload):
        raise RuntimeError("handler failure")

    bus.subscribe(channels.DELETE_MESSAGE, broken)
    bus.subscribe(channels.DELETE_MESSAGE, seen.append)

    assert bus.publish(channels.DELETE_MESSAGE, {"message_id": "m1"}) == 1  # nosec B101
    assert seen == [{"message_id": "m1"}]  # nosec B101


def test_unsubscribe_is_idempotent_and_channels_are_isolated():
    bus = EventBus()
    seen = []
    unsubscribe = bus.subscribe(channels.CLEAR_CONVERSATION, seen.append)
    bus.subscribe(channels.LANGUAGE_CHANGED, seen.append)

    unsubscribe()
    unsubscribe()

    assert bus.subscriber_count(channels.CLEAR_CONVERSATION) == 0  # nosec B101
    assert bus.publish(channels.CLEAR_CONVERSATION, "x") == 0  # nosec B101
    assert bus.publish(channels.LANGUAGE_CHANGED, "en") == 1  # nosec B101
    assert seen == ["en"]  # nosec B101


def test_two_buses_do_not_share_subscribers():
    first, second = EventBus(), EventBus()
    seen = []
    first.subscribe(channels.CONVERSATION_CREATED, seen.append)

    second.publish(channels.CONVERSATION_CREATED, "c1")
    assert seen == []  # nosec B101

    first.clear()
    assert first.subscriber_count(channels.CONVERSATION_CREATED) == 0  # nosec B101
