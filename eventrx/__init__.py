"""
# Observables from event emitters

Primary entry point: `fromEvents(eventMap, emitter)`

Install with pip: "pip3 install eventrx"

`fromEvents` wraps any object that can register and remove named listeners (it needs `on(name, callback)` and
`off(name, callback)`) in a [reactivex](https://rxpy.readthedocs.io/) Observable.  An *event map* says which of
the emitter's events become items, which one is an error and which ones complete the sequence.

The returned Observable is cold: listeners are only put on the emitter when you subscribe, every subscription gets
its own listeners, and disposing the subscription (or the sequence finishing) removes exactly those listeners again.

# Standard event maps

- `ReadableStreamMap` - items on `data`, error on `error`, completes on `end` or `close`
- `ServerMap` - items on `request`, each one a `{"request": ..., "response": ...}` dict
- `RequestMap` - an outgoing HTTP request, its `response` is the item
- `ResponseMap` - an incoming HTTP message, items are body chunks
- `ButtonMap` - `click`
- `InputMap` - `focus`, `blur`, `keyup` and `change`

Define your own with `EventMap(nexts=[...], errors=[...], completes=[...], projector=...)`.

# Example Usage
```
import reactivex.operators as ops
from eventrx import ReadableStreamMap, fromEvents
from eventrx.streams import ReadStream

stream = ReadStream("README.md", encoding="utf-8")
fromEvents(ReadableStreamMap, stream).pipe(
    ops.reduce(lambda acc, chunk: acc + chunk, "")
).subscribe(print, lambda e: print("Uh oh!", e))
stream.read()
```

"""

from eventrx.emitter import EventEmitter, EventSource, EventSourceError
from eventrx.event_map import (
    DEFAULT_EVENT_MAP,
    STANDARD_MAPS,
    ButtonMap,
    EventMap,
    EventMapError,
    InputMap,
    ReadableStreamMap,
    RequestMap,
    ResponseMap,
    ServerMap,
    identity,
)
from eventrx.from_events import MetaListener, fromEvents

__all__ = [
    "DEFAULT_EVENT_MAP",
    "STANDARD_MAPS",
    "ButtonMap",
    "EventEmitter",
    "EventMap",
    "EventMapError",
    "EventSource",
    "EventSourceError",
    "InputMap",
    "MetaListener",
    "ReadableStreamMap",
    "RequestMap",
    "ResponseMap",
    "ServerMap",
    "fromEvents",
    "identity",
]
