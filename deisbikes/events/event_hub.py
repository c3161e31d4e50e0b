"""
Event Hub
---------

Keeps track of the handlers subscribed to each event and calls them
when the event is emitted. Events can be referred to either through
their :class:`~deisbikes.events.EventList` or through the hub itself:

>>> hub.subscribe(WeatherEvents.this_happened, handler)
>>> hub.this_happened += handler
>>> hub.this_happened("It is raining.")
"""
from collections import defaultdict
from inspect import signature, Parameter
from typing import Callable, Dict, List, Set, Type, Union

from deisbikes import logger
from .event_list import EventList
from .exceptions import NoSuchEventError, NoSuchListenerError, InvalidHandlerError


class BoundEvent:
    """An event accessed through a hub, which supports ``+=``, ``-=`` and calling."""

    def __init__(self, hub: 'EventHub', event: Callable):
        self.hub = hub
        self.event = event

    def __iadd__(self, handler: Callable):
        self.hub.subscribe(self.event, handler)
        return self

    def __isub__(self, handler: Callable):
        self.hub.unsubscribe(self.event, handler)
        return self

    def __call__(self, *args, **kwargs):
        self.hub.emit(self.event, *args, **kwargs)

    def __repr__(self):
        return f"<BoundEvent {self.event.__qualname__}>"


class EventHub:

    def __init__(self, *event_lists: Type[EventList]):
        self._event_lists: Set[Type[EventList]] = set()
        self._listeners: Dict[Callable, List[Callable]] = defaultdict(list)
        self.add_events(*event_lists)

    def add_events(self, *event_lists: Type[EventList]):
        """Adds more event lists to the hub."""
        for event_list in event_lists:
            if not issubclass(event_list, EventList):
                raise TypeError(f"Expected an EventList, got {event_list}")
            self._event_lists.add(event_list)

    def subscribe(self, event: Union[Callable, BoundEvent], handler: Callable):
        """
        Subscribes a handler to an event.

        :raises NoSuchEventError: If the event isn't part of this hub.
        :raises InvalidHandlerError: If the handler doesn't accept the event's arguments.
        """
        event = self._resolve(event)
        if event not in self:
            raise NoSuchEventError(f"{event.__qualname__} is not an event on this hub.")

        self._check_handler(event, handler)
        self._listeners[event].append(handler)

    def unsubscribe(self, event: Union[Callable, BoundEvent], handler: Callable):
        """
        Removes a handler from an event.

        :raises NoSuchListenerError: If the handler was never subscribed.
        """
        event = self._resolve(event)
        try:
            self._listeners[event].remove(handler)
        except ValueError:
            raise NoSuchListenerError(f"{handler} is not subscribed to {event.__qualname__}.") from None

    def emit(self, event: Union[Callable, BoundEvent], *args, **kwargs):
        """
        Calls every handler subscribed to the event, in the order they subscribed.
        A handler that raises is logged and skipped, the rest are still called.
        """
        event = self._resolve(event)
        for handler in list(self._listeners.get(event, ())):
            try:
                handler(*args, **kwargs)
            except Exception:
                logger.exception("Handler %s failed on %s", handler, event.__qualname__)

    def __contains__(self, item):
        """Checks if an event list, or a single event, is part of this hub."""
        if isinstance(item, type):
            return item in self._event_lists
        return any(item in event_list for event_list in self._event_lists)

    def __getattr__(self, name):
        """Looks up an event by name on the hub's event lists."""
        if name.startswith("_"):
            raise AttributeError(name)

        for event_list in self._event_lists:
            event = getattr(event_list, name, None)
            if event is not None and event in event_list:
                return BoundEvent(self, event)

        raise NoSuchEventError(f"No event {name} on this hub.")

    def __setattr__(self, name, value):
        # ``hub.event += handler`` assigns the bound event back onto the hub
        if isinstance(value, BoundEvent) and value.hub is self:
            return
        super().__setattr__(name, value)

    @staticmethod
    def _resolve(event: Union[Callable, BoundEvent]) -> Callable:
        return event.event if isinstance(event, BoundEvent) else event

    @staticmethod
    def _check_handler(event: Callable, handler: Callable):
        parameters = [
            parameter for parameter in signature(event).parameters.values()
            if parameter.name != "self" and parameter.kind in (Parameter.POSITIONAL_ONLY, Parameter.POSITIONAL_OR_KEYWORD)
        ]

        try:
            signature(handler).bind(*(None for _ in parameters))
        except TypeError as error:
            raise InvalidHandlerError(
                f"{handler} must accept the arguments of {event.__qualname__}: "
                f"({', '.join(parameter.name for parameter in parameters)})"
            ) from error
