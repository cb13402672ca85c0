"""Turn pypubsub topics into an Observable.
   To run: python examples/pub_sub_example.py
"""

from pubsub import pub

from eventrx import EventMap, fromEvents
from eventrx.pubsub_source import TopicEmitter


def onLine(line):  # pylint: disable=unused-argument
    """A regular pypubsub listener, which also tells pypubsub what a log line carries"""


def onStop():
    """Listener for the stop topic"""


pub.subscribe(onLine, "example.log.line")
pub.subscribe(onStop, "example.stop")

topics = TopicEmitter(topicArgs={"example.log.line": ("line",)})
logMap = EventMap(nexts=["example.log.line"], completes=["example.stop"], name="Log")

fromEvents(logMap, topics).subscribe(
    lambda line: print(f"Got: {line}"),
    lambda e: print("Uh oh!", e),
    lambda: print("All done!"),
)

pub.sendMessage("example.log.line", line="hello")
pub.sendMessage("example.log.line", line="world")
pub.sendMessage("example.stop")
