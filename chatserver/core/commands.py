"""Command handlers a client can invoke."""

import re
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, Optional

from chatserver.models.message import NickChange, NickList, UserSays
from chatserver.core.exceptions import NickInUseError, ValidationError

if TYPE_CHECKING:
    from chatserver.core.session_manager import SessionManager

DEFAULT_NICK_PATTERN = r"^[\w-]+$"


class CommandName(Enum):
    """Names of the commands a client can call."""
    NICK = "nick"
    SAY = "say"
    WHO = "who"


Handler = Callable[..., None]


class NickPolicy:
    """Allowed character set for nicks, expressed as a regular expression."""

    def __init__(self, pattern: str = DEFAULT_NICK_PATTERN):
        self.pattern = re.compile(pattern)

    def is_valid(self, nick: str) -> bool:
        return self.pattern.fullmatch(nick) is not None

    def __repr__(self) -> str:
        return f"NickPolicy(pattern={self.pattern.pattern!r})"


def nick(session: 'SessionManager', client_id: str, current_nick: str, value: Optional[str] = None) -> None:
    """Change the caller's nick and announce it."""
    if not value:
        raise ValidationError("No nick given")
    owner = session.find_by_nick(value)
    if owner is not None and owner.id != client_id:
        raise NickInUseError(value)
    if not session.nick_policy.is_valid(value):
        raise ValidationError(f"'{value}' is not a valid nick")

    old_nick = session.rename(client_id, value)
    session.broadcast(NickChange(old_nick=old_nick, new_nick=value))


def say(session: 'SessionManager', client_id: str, current_nick: str, value: Optional[str] = None) -> None:
    """Broadcast a chat line."""
    if not value:
        raise ValidationError("Nothing to say")

    session.broadcast(UserSays(nick=current_nick, text=value))


def who(session: 'SessionManager', client_id: str, current_nick: str, value: Optional[str] = None) -> None:
    """Send the nick list to the caller only."""
    session.send_to(client_id, NickList(list=session.nicks()))


COMMAND_HANDLERS: Dict[CommandName, Handler] = {
    CommandName.NICK: nick,
    CommandName.SAY: say,
    CommandName.WHO: who,
}
