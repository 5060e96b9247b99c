"""Shared fixtures for the chat server tests."""

from typing import List

import pytest

from chatserver.models.message import Message
from chatserver.core.exceptions import ChannelClosedError
from chatserver.core.session_manager import SessionManager
from chatserver.core.transport import NORMAL_CLOSURE, Channel


class RecordingChannel(Channel):
    """Channel that keeps every message it is given."""

    def __init__(self, fail: bool = False):
        self.messages: List[Message] = []
        self.fail = fail
        self.closed = False
        self.close_code = None

    def send(self, message: Message) -> None:
        if self.closed:
            raise ChannelClosedError("closed")
        if self.fail:
            raise ConnectionResetError("peer went away")
        self.messages.append(message)

    async def close(self, code: int = NORMAL_CLOSURE) -> None:
        self.closed = True
        self.close_code = code

    def clear(self) -> None:
        self.messages.clear()


@pytest.fixture
def session():
    """Session manager with default handlers and nick policy."""
    return SessionManager()


@pytest.fixture
def make_channel():
    """Factory for recording channels."""
    return RecordingChannel
