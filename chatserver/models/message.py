"""Outbound message models sent from the server to clients."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class MessageType(Enum):
    """Kinds of messages the server can emit."""
    USER_CONNECTED = "user-connected"
    USER_DISCONNECTED = "user-disconnected"
    USER_SAYS = "user-says"
    NICK_CHANGE = "nick-change"
    NICK_LIST = "nick-list"
    ERROR = "error"
    NOTICE = "notice"


@dataclass
class Message:
    """Base class for all outbound messages."""

    type: MessageType = field(init=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert message to its wire representation."""
        return {'type': self.type.value}


@dataclass
class UserConnected(Message):
    """A client joined the chat."""

    nick: str

    def __post_init__(self):
        self.type = MessageType.USER_CONNECTED

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result['nick'] = self.nick
        return result


@dataclass
class UserDisconnected(Message):
    """A client left the chat."""

    nick: str

    def __post_init__(self):
        self.type = MessageType.USER_DISCONNECTED

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result['nick'] = self.nick
        return result


@dataclass
class UserSays(Message):
    """A chat line from a client."""

    nick: str
    text: str

    def __post_init__(self):
        self.type = MessageType.USER_SAYS

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result.update({
            'nick': self.nick,
            'text': self.text
        })
        return result


@dataclass
class NickChange(Message):
    """A client changed its nick."""

    old_nick: str
    new_nick: str

    def __post_init__(self):
        self.type = MessageType.NICK_CHANGE

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result.update({
            'oldNick': self.old_nick,
            'newNick': self.new_nick
        })
        return result


@dataclass
class NickList(Message):
    """The nicks of every connected client."""

    list: List[str]

    def __post_init__(self):
        self.type = MessageType.NICK_LIST

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result['list'] = list(self.list)
        return result


@dataclass
class ErrorMessage(Message):
    """A problem with the recipient's last command."""

    text: str

    def __post_init__(self):
        self.type = MessageType.ERROR

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result['text'] = self.text
        return result


@dataclass
class Notice(Message):
    """A server announcement."""

    text: str

    def __post_init__(self):
        self.type = MessageType.NOTICE

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result['text'] = self.text
        return result

    @classmethod
    def shutdown(cls) -> 'Notice':
        return cls(text="Shutting down server")
