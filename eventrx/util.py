"""Utility functions.
"""
import sys
from typing import List, NoReturn

from eventrx.event_map import EventMap, identity


def our_exit(message, return_value=1) -> NoReturn:
    """Print the message and return a value.
    return_value defaults to 1 (non-successful)
    """
    print(message)
    sys.exit(return_value)


def stripnl(s) -> str:
    """Remove newlines from a string (and remove extra whitespace)"""
    s = str(s).replace("\n", " ")
    return " ".join(s.split())


def projectorName(eventMap: EventMap) -> str:
    """A short description of the projector of eventMap"""
    if eventMap.projector is identity:
        return "identity"
    return getattr(eventMap.projector, "__name__", type(eventMap.projector).__name__).lstrip("_")


def mapRow(eventMap: EventMap) -> List[str]:
    """One table row describing eventMap"""
    return [
        eventMap.name or "custom",
        ", ".join(eventMap.nexts) or "-",
        ", ".join(eventMap.errors) or "-",
        ", ".join(eventMap.completes) or "-",
        projectorName(eventMap),
    ]
