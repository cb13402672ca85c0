"""fromEvents(): turn an event source into a reactivex Observable.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional

import reactivex
from reactivex import Observable, abc
from reactivex.disposable import Disposable

from eventrx.emitter import EventSource, findRemover
from eventrx.event_map import DEFAULT_EVENT_MAP, EventMap, EventMapError

NEXT = "next"
ERROR = "error"
COMPLETE = "complete"


@dataclass(frozen=True)
class MetaListener:
    """One listener a subscription put on its source.

    type (str): "next", "error" or "complete"
    event (str): the event name it was registered for
    listener (callable): the exact callable handed to source.on()
    """

    type: str
    event: str
    listener: Callable[..., Any]


def _asEventMap(eventMap: Any) -> EventMap:
    if eventMap is None:
        return DEFAULT_EVENT_MAP
    if isinstance(eventMap, EventMap):
        return eventMap
    if isinstance(eventMap, Mapping):
        return EventMap.fromDict(eventMap)
    raise EventMapError(f"Expected an EventMap, got {type(eventMap).__name__}")


def fromEvents(eventMap: Optional[EventMap] = None, emitter: Optional[EventSource] = None) -> Observable:
    """Create a cold Observable from the events of emitter.

    Every subscription registers its own listeners on emitter: one per name in
    eventMap.nexts (items), eventMap.errors (error) and eventMap.completes
    (completion).  Disposing the subscription, or the sequence terminating,
    removes exactly those listeners again.

    The older fromEvents(emitter, eventMap) argument order is accepted too.

    Raises:
        EventMapError: eventMap is not an event map
        EventSourceError: emitter can't register and remove listeners
    """
    if isinstance(emitter, (EventMap, Mapping)) and not isinstance(eventMap, (EventMap, Mapping)):
        eventMap, emitter = emitter, eventMap
    elif emitter is None and callable(getattr(eventMap, "on", None)):
        eventMap, emitter = None, eventMap
    em = _asEventMap(eventMap)
    remover = findRemover(emitter)
    label = em.name or "custom"
    logging.debug(f"fromEvents {label} map on {type(emitter).__name__}")

    def subscribe(observer: abc.ObserverBase, scheduler: Optional[abc.SchedulerBase] = None) -> abc.DisposableBase:
        listeners: List[MetaListener] = []

        def onNext(*args):
            observer.on_next(em.projector(*args))

        def onError(*args):
            logging.debug(f"{label} source errored")
            observer.on_error(args[0] if args else None)

        def onComplete(*args):  # pylint: disable=unused-argument
            logging.debug(f"{label} source completed")
            observer.on_completed()

        for kind, names, fn in ((NEXT, em.nexts, onNext), (ERROR, em.errors, onError), (COMPLETE, em.completes, onComplete)):
            for name in names:
                emitter.on(name, fn)
                listeners.append(MetaListener(kind, name, fn))
        logging.debug(f"attached {len(listeners)} listener(s) for {label}")

        def teardown():
            logging.debug(f"detaching {len(listeners)} listener(s) for {label}")
            failure = None
            # every listener gets its removal attempt, the first failure is raised afterwards
            while listeners:
                ml = listeners.pop(0)
                try:
                    remover(ml.event, ml.listener)
                except Exception as ex:  # pylint: disable=broad-except
                    logging.debug(f"failed to detach {ml.type} listener for {ml.event}: {ex}")
                    if failure is None:
                        failure = ex
            if failure is not None:
                raise failure

        return Disposable(teardown)

    return reactivex.create(subscribe)
