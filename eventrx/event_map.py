"""Event maps: which events of a source become items, errors and completion.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Mapping, Tuple

Projector = Callable[..., Any]


class EventMapError(Exception):
    """An exception class for malformed event maps"""

    def __init__(self, message):
        self.message = message
        super().__init__(self.message)


def identity(*args):
    """Pass event arguments through unchanged.

    No arguments gives None, a single argument is returned as is, and
    several arguments come back as a tuple.
    """
    if not args:
        return None
    if len(args) == 1:
        return args[0]
    return args


def _eventNames(label: str, names: Iterable[str]) -> Tuple[str, ...]:
    """Normalize a list-like of event names to a tuple"""
    # a bare string is iterable, but "data" would mean ("d", "a", "t", "a")
    if isinstance(names, (str, bytes)):
        raise EventMapError(f"{label} must be a list of event names, not the single name {names!r}")
    try:
        result = tuple(names)
    except TypeError as ex:
        raise EventMapError(f"{label} must be a list of event names, got {type(names).__name__}") from ex
    for name in result:
        if not isinstance(name, str):
            raise EventMapError(f"{label} contains {name!r}, event names must be strings")
    return result


@dataclass(frozen=True)
class EventMap:
    """Describes one kind of event source.

    nexts (list of str): events whose arguments become items
    errors (list of str): events whose first argument becomes the error
    completes (list of str): events which complete the sequence
    projector (callable): combines the arguments of a next event into an item
    name (str): label used when logging and listing maps

    Maps are equal when their event names and projector are; name is ignored.
    """

    nexts: Tuple[str, ...] = ()
    errors: Tuple[str, ...] = ()
    completes: Tuple[str, ...] = ()
    projector: Projector = field(default=identity)
    name: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        # frozen, so normalize through object.__setattr__
        for label in ("nexts", "errors", "completes"):
            object.__setattr__(self, label, _eventNames(label, getattr(self, label)))
        if self.projector is None:
            object.__setattr__(self, "projector", identity)
        if not callable(self.projector):
            raise EventMapError(f"projector must be callable, got {type(self.projector).__name__}")

    @classmethod
    def fromDict(cls, d: Mapping[str, Any]) -> "EventMap":
        """Build an EventMap from a plain mapping with the same keys"""
        unknown = set(d) - {"nexts", "errors", "completes", "projector", "name"}
        if unknown:
            raise EventMapError(f"Unknown event map keys: {', '.join(sorted(unknown))}")
        if "nexts" not in d:
            raise EventMapError("An event map needs a nexts list (it may be empty)")
        return cls(**d)

    def events(self) -> Tuple[str, ...]:
        """All event names this map listens for, nexts first"""
        return self.nexts + self.errors + self.completes


def _serverProjector(request, response) -> Dict[str, Any]:
    return {"request": request, "response": response}


# Standard event maps

ReadableStreamMap = EventMap(
    nexts=("data",), errors=("error",), completes=("end", "close"), name="ReadableStream"
)
"""A stream that yields chunks, e.g. eventrx.streams.ReadStream"""

ServerMap = EventMap(
    nexts=("request",),
    errors=("error",),
    completes=("close",),
    projector=_serverProjector,
    name="Server",
)
"""An HTTP server; each item is a {"request": ..., "response": ...} dict"""

RequestMap = EventMap(
    nexts=("response",),
    errors=("error",),
    completes=("abort", "aborted", "close", "end"),
    name="Request",
)
"""An outgoing HTTP request, which yields its response"""

ResponseMap = EventMap(
    nexts=("data",),
    errors=("error",),
    completes=("abort", "aborted", "close", "end"),
    name="Response",
)
"""An incoming HTTP message, which yields body chunks"""

ButtonMap = EventMap(nexts=("click",), name="Button")

InputMap = EventMap(nexts=("focus", "blur", "keyup", "change"), name="Input")

DEFAULT_EVENT_MAP = EventMap(name="Default")
"""Binds no events at all, used when fromEvents() is not given a map"""

STANDARD_MAPS: Dict[str, EventMap] = {
    m.name: m for m in (ReadableStreamMap, ServerMap, RequestMap, ResponseMap, ButtonMap, InputMap)
}
