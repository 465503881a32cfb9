"""Unit tests configuration file."""

import json

import pytest


def pytest_configure(config):
    """Disable verbose output when running tests."""
    terminal = config.pluginmanager.getplugin("terminal")
    if terminal:
        terminal.TerminalReporter.showfspath = False


class RecordingChannel:
    """Channel that keeps every frame sent through it."""

    def __init__(self):
        self.sent = []
        self.fail_with = None

    def send(self, frame):
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(frame)

    @property
    def text_frames(self):
        return [json.loads(frame) for frame in self.sent if isinstance(frame, str)]

    @property
    def binary_frames(self):
        return [frame for frame in self.sent if not isinstance(frame, str)]


@pytest.fixture
def channel():
    return RecordingChannel()
