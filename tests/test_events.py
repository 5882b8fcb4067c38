"""Tests for EventBus."""

import logging

import pytest

from vantageconnect.events import EventBus
from vantageconnect.models.events import (
    BlindChanged,
    DiscoveryComplete,
    Event,
    LoadChanged,
    StatusEvent,
)


class TestEventBus:
    """Tests for EventBus class."""

    @pytest.fixture
    def bus(self):
        return EventBus()

    def test_delivers_to_exact_type(self, bus):
        received = []
        bus.subscribe(LoadChanged, received.append)

        bus.publish(LoadChanged(vid="12", level=75))
        bus.publish(BlindChanged(vid="30", position=45))

        assert received == [LoadChanged(vid="12", level=75)]

    def test_base_class_subscription(self, bus):
        status = []
        everything = []
        bus.subscribe(StatusEvent, status.append)
        bus.subscribe(Event, everything.append)

        bus.publish(LoadChanged(vid="12", level=75))
        bus.publish(DiscoveryComplete())

        assert status == [LoadChanged(vid="12", level=75)]
        assert everything == [LoadChanged(vid="12", level=75), DiscoveryComplete()]

    def test_publish_order_preserved(self, bus):
        received = []
        bus.subscribe(LoadChanged, lambda e: received.append(e.level))
        for level in (10, 20, 30):
            bus.publish(LoadChanged(vid="12", level=level))
        assert received == [10, 20, 30]

    def test_publish_returns_delivery_count(self, bus):
        bus.subscribe(LoadChanged, lambda e: None)
        bus.subscribe(StatusEvent, lambda e: None)
        assert bus.publish(LoadChanged(vid="12", level=1)) == 2
        assert bus.publish(BlindChanged(vid="30", position=1)) == 1

    def test_unsubscribe(self, bus):
        received = []
        unsubscribe = bus.subscribe(LoadChanged, received.append)
        unsubscribe()
        unsubscribe()

        bus.publish(LoadChanged(vid="12", level=75))
        assert received == []
        assert bus.subscriber_count(LoadChanged) == 0

    def test_failing_callback_does_not_stop_delivery(self, bus, caplog):
        received = []

        def broken(event):
            raise RuntimeError("subscriber bug")

        bus.subscribe(LoadChanged, broken)
        bus.subscribe(LoadChanged, received.append)

        with caplog.at_level(logging.ERROR, logger="vantageconnect.events"):
            bus.publish(LoadChanged(vid="12", level=1))
            bus.publish(LoadChanged(vid="12", level=2))

        assert [event.level for event in received] == [1, 2]
        errors = [record for record in caplog.records if record.levelno == logging.ERROR]
        assert len(errors) == 1

    def test_subscriber_count_and_clear(self, bus):
        bus.subscribe(LoadChanged, lambda e: None)
        bus.subscribe(BlindChanged, lambda e: None)
        assert bus.subscriber_count() == 2
        bus.clear()
        assert bus.subscriber_count() == 0
