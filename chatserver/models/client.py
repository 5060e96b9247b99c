"""Client model for managing connected clients."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from chatserver.models.message import Message

if TYPE_CHECKING:
    from chatserver.core.transport import Channel


@dataclass
class Client:
    """Represents a connected participant and its outbound channel."""

    id: str
    nick: str
    channel: 'Channel' = field(repr=False, compare=False)

    def send(self, message: Message) -> None:
        """Hand a message to this client's channel."""
        self.channel.send(message)

    def __repr__(self) -> str:
        return f"Client(id={self.id!r}, nick={self.nick!r})"
