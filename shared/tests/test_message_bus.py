from dataclasses import dataclass

from shared.application.message_bus import MessageBus
from shared.domain.base import DomainEvent


@dataclass(frozen=True)
class SomethingHappened(DomainEvent):
    value: int


@dataclass(frozen=True)
class SomethingSpecificHappened(SomethingHappened):
    pass


def test_handlers_for_base_class_receive_subclasses():
    bus = MessageBus()
    received = []
    bus.register_event_handler(SomethingHappened, received.append)

    bus.publish_events([SomethingSpecificHappened(value=1), SomethingHappened(value=2)])

    assert [e.value for e in received] == [1, 2]


def test_failing_handler_does_not_stop_the_others():
    bus = MessageBus()
    received = []

    def broken(event):
        raise RuntimeError("handler bug")

    bus.register_event_handler(SomethingHappened, broken)
    bus.register_event_handler(SomethingHappened, received.append)

    bus.publish_events([SomethingHappened(value=3)])

    assert len(received) == 1


def test_unregistered_handler_is_not_called():
    bus = MessageBus()
    received = []
    bus.register_event_handler(SomethingHappened, received.append)
    bus.unregister_event_handler(SomethingHappened, received.append)

    bus.publish_events([SomethingHappened(value=4)])

    assert received == []


def test_event_to_dict_names_the_event():
    event = SomethingHappened(value=5, aggregate_id="agg-1")

    data = event.to_dict()

    assert data["event_type"] == "SomethingHappened"
    assert data["aggregate_id"] == "agg-1"
