"""Common pytest code (place for fixtures)."""

import argparse

import pytest

from eventrx import er_config


class Recorder:
    """Observer that remembers everything it was told, in order."""

    def __init__(self):
        self.events = []

    def on_next(self, value):
        self.events.append(("next", value))

    def on_error(self, error):
        self.events.append(("error", error))

    def on_completed(self):
        self.events.append(("complete", None))

    @property
    def items(self):
        return [v for kind, v in self.events if kind == "next"]

    def subscribeTo(self, observable):
        """Subscribe to observable and return the subscription"""
        return observable.subscribe(self.on_next, self.on_error, self.on_completed)


@pytest.fixture
def reset_er_config():
    """Fixture to reset er_config."""
    parser = argparse.ArgumentParser(add_help=False)
    er_config.reset()
    er_config.parser = parser


@pytest.fixture
def recorder():
    """Fixture for a fresh Recorder."""
    return Recorder()
