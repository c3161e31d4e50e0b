import pytest

from deisbikes.events import EventHub, NoSuchEventError, NoSuchListenerError, InvalidHandlerError, EventList


class TestException(Exception):
    pass


class ExampleEvents(EventList):

    @staticmethod
    def something_happened(argument):
        """An example event."""


class SecondExampleEvents(EventList):

    @staticmethod
    def something_else_happened(argument):
        """Another event."""


class TestRegistry:

    @staticmethod
    def handler(argument):
        pass

    @staticmethod
    def invalid_handler():
        pass

    async def test_event_list_in_emitter(self):
        """Assert that you can check the existence of an event list on a hub."""
        hub = EventHub(ExampleEvents)
        assert ExampleEvents in hub
        assert SecondExampleEvents not in hub

    async def test_event_in_emitter(self):
        """Assert that you can check the existence of an event on an hub."""
        hub = EventHub(ExampleEvents)
        assert ExampleEvents.something_happened in hub
        assert SecondExampleEvents.something_else_happened not in hub

    async def test_missing_event(self):
        """Assert that getting a non-existent event on an event list raises an error."""
        with pytest.raises(AttributeError):
            ExampleEvents.bad_event

    async def test_event_on_emitter(self):
        """Assert that an event can be accessed through the hub."""
        hub = EventHub(ExampleEvents)
        assert hub.something_happened.event == ExampleEvents.something_happened

    async def test_missing_event_on_emitter(self):
        """Assert that getting a non-existent event on an emitter raises an error."""
        emitter = EventHub()
        with pytest.raises(NoSuchEventError):
            emitter.bad_event

    async def test_subscribe_to_event(self):
        """Assert that a handler can be registered on a hub's event."""
        hub = EventHub(ExampleEvents)
        assert sum((len(l) for l in hub._listeners.values()), 0) == 0
        hub.subscribe(ExampleEvents.something_happened, self.handler)
        assert sum((len(l) for l in hub._listeners.values()), 0) != 0

    async def test_subscribe_to_foreign_event(self):
        """Assert that a handler can't subscribe to an event the hub doesn't have."""
        hub = EventHub(ExampleEvents)
        with pytest.raises(NoSuchEventError):
            hub.subscribe(SecondExampleEvents.something_else_happened, self.handler)

    async def test_subscriber_has_similar_signature(self):
        """Assert that a subscriber to an event must have a similar signature."""
        emitter = EventHub(ExampleEvents)
        with pytest.raises(InvalidHandlerError):
            emitter.subscribe(ExampleEvents.something_happened, self.invalid_handler)

    async def test_subscribe_to_event_through_emitter(self):
        """Assert that an event can also be referenced through the emitter."""
        emitter = EventHub(ExampleEvents)
        assert sum((len(l) for l in emitter._listeners.values()), 0) == 0
        emitter.subscribe(emitter.something_happened, self.handler)
        assert sum((len(l) for l in emitter._listeners.values()), 0) != 0

    async def test_unsubscribe_from_event(self):
        """Assert that a handler can be unsubscribed from an event."""
        emitter = EventHub(ExampleEvents)
        emitter.subscribe(emitter.something_happened, self.handler)
        emitter.unsubscribe(emitter.something_happened, self.handler)
        assert not emitter._listeners[ExampleEvents.something_happened]

    async def test_bad_unsubscribe(self):
        """Assert that unsubscribing a handler that isn't registered fails."""
        emitter = EventHub()
        with pytest.raises(NoSuchListenerError):
            emitter.unsubscribe(ExampleEvents.something_happened, self.handler)

    async def test_trigger_event(self):
        emitter = EventHub(ExampleEvents)
        calls = []

        emitter.subscribe(ExampleEvents.something_happened, calls.append)
        emitter.emit(ExampleEvents.something_happened, "test")
        assert calls == ["test"]

    async def test_failing_handler_is_skipped(self, caplog):
        """Assert that a handler that raises is logged and the rest still run."""
        emitter = EventHub(ExampleEvents)
        calls = []

        def raise_listener(argument):
            raise TestException("This runs!")

        emitter.subscribe(ExampleEvents.something_happened, raise_listener)
        emitter.subscribe(ExampleEvents.something_happened, calls.append)
        emitter.emit(ExampleEvents.something_happened, "test")

        assert calls == ["test"]
        assert "This runs!" in caplog.text

    async def test_handlers_called_in_order(self):
        """Assert that handlers are called in the order they subscribed."""
        emitter = EventHub(ExampleEvents)
        calls = []
        emitter.something_happened += lambda argument: calls.append(("first", argument))
        emitter.something_happened += lambda argument: calls.append(("second", argument))

        emitter.something_happened("test")
        assert calls == [("first", "test"), ("second", "test")]

    async def test_subscribe_to_event_natural_syntax(self):
        emitter = EventHub(ExampleEvents)
        emitter.something_happened += self.handler
        assert emitter._listeners[ExampleEvents.something_happened] == [self.handler]

    async def test_unsubscribe_to_event_natural_syntax(self):
        emitter = EventHub(ExampleEvents)
        emitter.subscribe(ExampleEvents.something_happened, self.handler)
        emitter.something_happened -= self.handler
        assert not emitter._listeners[ExampleEvents.something_happened]

    async def test_trigger_event_natural_syntax(self):
        """Assert that events can be triggered with the natural syntax."""
        emitter = EventHub(ExampleEvents)
        calls = []
        emitter.something_happened += calls.append
        emitter.something_happened("test")
        assert calls == ["test"]
