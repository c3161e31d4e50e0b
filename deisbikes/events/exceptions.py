class EventError(Exception):
    pass


class NoSuchEventError(EventError, AttributeError):
    """Raised when an event is not part of any of the hub's event lists."""


class NoSuchListenerError(EventError):
    """Raised when removing a handler that was never subscribed."""


class InvalidHandlerError(EventError):
    """Raised when a handler can't be called with the arguments of its event."""
