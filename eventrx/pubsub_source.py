"""Use pypubsub topics as an event source.

pypubsub delivers message data as keyword arguments and only keeps weak
references to its listeners, so TopicEmitter puts a small glue function
between each topic and each listener registered through on().

    from pubsub import pub
    from eventrx import EventMap, fromEvents
    from eventrx.pubsub_source import TopicEmitter

    lines = TopicEmitter(topicArgs={"meshtastic.log.line": ("line",)})
    logMap = EventMap(nexts=("meshtastic.log.line",))
    fromEvents(logMap, lines).subscribe(print)
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from pubsub import pub  # type: ignore[import-untyped]

Listener = Callable[..., Any]


class TopicEmitter:
    """An event source whose event names are pypubsub topic names.

    topicArgs maps a topic name to the order its message data should be
    passed to listeners as positional arguments.  Topics not listed there
    deliver all their message data as a single dict (or nothing, for a
    message without data).
    """

    def __init__(self, topicArgs: Optional[Mapping[str, Sequence[str]]] = None, publisher=pub) -> None:
        self.topicArgs: Dict[str, Tuple[str, ...]] = {k: tuple(v) for k, v in (topicArgs or {}).items()}
        self.publisher = publisher
        # we must keep the glue functions ourselves so they don't get garbage collected
        self._glue: Dict[Tuple[str, Listener], List[Listener]] = {}

    def _makeGlue(self, topic: str, listener: Listener) -> Listener:
        names = self.topicArgs.get(topic)

        def glue(**msgData):
            if names is not None:
                listener(*[msgData.get(n) for n in names])
            elif msgData:
                listener(msgData)
            else:
                listener()

        return glue

    def on(self, topic: str, listener: Listener) -> "TopicEmitter":
        """Subscribe listener to topic.

        The topic's message data specification has to be known to pypubsub
        already (from a sender or another listener), the glue accepts any
        message data.
        """
        glue = self._makeGlue(topic, listener)
        self.publisher.subscribe(glue, topic)
        self._glue.setdefault((topic, listener), []).append(glue)
        logging.debug(f"subscribed to topic {topic}")
        return self

    def off(self, topic: str, listener: Listener) -> "TopicEmitter":
        """Unsubscribe the most recent registration of listener from topic"""
        glues = self._glue.get((topic, listener))
        if not glues:
            return self
        glue = glues.pop()
        if not glues:
            del self._glue[(topic, listener)]
        self.publisher.unsubscribe(glue, topic)
        logging.debug(f"unsubscribed from topic {topic}")
        return self

    def emit(self, topic: str, **msgData) -> None:
        """Publish msgData on topic"""
        self.publisher.sendMessage(topic, **msgData)

    def listenerCount(self, topic: str) -> int:
        """Return the number of listeners registered through this emitter for topic"""
        return sum(len(glues) for (t, _), glues in self._glue.items() if t == topic)
