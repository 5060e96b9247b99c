"""Transport channel abstraction consumed by the session manager."""

from abc import ABC, abstractmethod

from chatserver.models.message import Message

NORMAL_CLOSURE = 1000
GOING_AWAY = 1001
POLICY_VIOLATION = 1008


class Channel(ABC):
    """
    Ordered, message-framed connection to a single client.

    ``send`` must not block: implementations queue or write immediately and
    raise ``ChannelClosedError`` once the channel can no longer deliver.
    """

    @abstractmethod
    def send(self, message: Message) -> None:
        """Queue a message for delivery."""

    @abstractmethod
    async def close(self, code: int = NORMAL_CLOSURE) -> None:
        """Flush what can be flushed and release the connection."""
