"""Event emitter classes.

Anything that can register and deregister a named listener is an event
source as far as fromEvents() is concerned. EventEmitter is the in-process
implementation used by the bundled sources in eventrx.streams.
"""

import logging
from typing import Any, Callable, Dict, List, Protocol, runtime_checkable

Listener = Callable[..., Any]


class EventSourceError(Exception):
    """An exception class for objects that can't be used as an event source"""

    def __init__(self, message):
        self.message = message
        super().__init__(self.message)


@runtime_checkable
class EventSource(Protocol):
    """The capability fromEvents() needs from a source."""

    def on(self, event: str, listener: Listener) -> Any:
        """Register listener for the named event."""

    def off(self, event: str, listener: Listener) -> Any:
        """Remove a previously registered listener for the named event."""


def findRemover(source: Any) -> Callable[[str, Listener], Any]:
    """Return the bound method used to detach listeners from source.

    off() is preferred, remove_listener() and removeListener() are accepted
    for emitters that follow other naming conventions.
    """
    if not callable(getattr(source, "on", None)):
        raise EventSourceError(f"{type(source).__name__} has no on() method to register listeners with")
    for name in ("off", "remove_listener", "removeListener"):
        remover = getattr(source, name, None)
        if callable(remover):
            return remover
    raise EventSourceError(f"{type(source).__name__} has no off() method to remove listeners with")


class EventEmitter:
    """A synchronous emitter of named events.

    To publish an event call emit("data", chunk) or whatever.  Every listener
    registered for that name is called in registration order with the same
    positional arguments.
    """

    def __init__(self) -> None:
        """Initialize the EventEmitter object."""
        self._listeners: Dict[str, List[Listener]] = {}

    def on(self, event: str, listener: Listener) -> "EventEmitter":
        """Register listener for event.

        The same listener may be registered more than once, it is then called
        once per registration.
        """
        self._listeners.setdefault(event, []).append(listener)
        return self

    addListener = on

    def once(self, event: str, listener: Listener) -> "EventEmitter":
        """Register listener for the next firing of event only."""

        def wrapper(*args):
            self.off(event, wrapper)
            return listener(*args)

        wrapper.listener = listener  # type: ignore[attr-defined]
        return self.on(event, wrapper)

    def off(self, event: str, listener: Listener) -> "EventEmitter":
        """Remove the most recently added registration of listener for event.

        Removing a listener that isn't registered is not an error.
        """
        registered = self._listeners.get(event)
        if not registered:
            return self
        for i in range(len(registered) - 1, -1, -1):
            candidate = registered[i]
            if candidate is listener or getattr(candidate, "listener", None) is listener:
                del registered[i]
                break
        if not registered:
            del self._listeners[event]
        return self

    removeListener = off

    def removeAllListeners(self, event=None) -> "EventEmitter":
        """Remove every listener for event, or for all events if event is None."""
        if event is None:
            self._listeners.clear()
        else:
            self._listeners.pop(event, None)
        return self

    def emit(self, event: str, *args) -> bool:
        """Call each listener for event with args.

        Returns True if the event had listeners.  Exceptions raised by a
        listener propagate to the caller of emit().
        """
        # copy, listeners may detach themselves (or others) while we iterate
        registered = list(self._listeners.get(event, ()))
        if not registered:
            return False
        logging.debug(f"emit {event} to {len(registered)} listener(s)")
        for fn in registered:
            fn(*args)
        return True

    def listeners(self, event: str) -> List[Listener]:
        """Return a copy of the listeners registered for event."""
        return list(self._listeners.get(event, ()))

    def listenerCount(self, event: str) -> int:
        """Return the number of listeners registered for event."""
        return len(self._listeners.get(event, ()))

    def eventNames(self) -> List[str]:
        """Return the names of events which have listeners."""
        return list(self._listeners)
