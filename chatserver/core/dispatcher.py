"""Parsing of raw client payloads and routing to command handlers."""

import logging
import re
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

from chatserver.models.client import Client
from chatserver.models.command import Command
from chatserver.core.commands import COMMAND_HANDLERS, CommandName, Handler
from chatserver.core.exceptions import MalformedMessageError, UnknownCommandError

if TYPE_CHECKING:
    from chatserver.core.session_manager import SessionManager

logger = logging.getLogger(__name__)

COMMAND_PATTERN = re.compile(r"^/(\w+)(?:\s(.+))?$", re.IGNORECASE | re.ASCII)


def parse_payload(payload: Any) -> Command:
    """
    Turn a raw inbound payload into a Command.

    ``/name value`` text becomes ``Command(name, value)``, any other text is
    a ``say``, and a mapping with a string ``command`` field is taken as is.

    Raises:
        MalformedMessageError: If the payload is neither text nor a command record
    """
    if isinstance(payload, str):
        match = COMMAND_PATTERN.fullmatch(payload)
        if match:
            return Command(name=match.group(1), value=match.group(2))
        return Command(name=CommandName.SAY.value, value=payload)

    if isinstance(payload, Mapping) and isinstance(payload.get('command'), str):
        value = payload.get('value')
        if value is not None and not isinstance(value, str):
            raise MalformedMessageError(payload)
        return Command.from_dict(payload)

    raise MalformedMessageError(payload)


class CommandDispatcher:
    """Routes commands to handlers through a static table."""

    def __init__(self, handlers: Optional[Mapping[CommandName, Handler]] = None):
        self.handlers: Dict[CommandName, Handler] = dict(handlers or COMMAND_HANDLERS)

    def lookup(self, name: str) -> Handler:
        """
        Find the handler for a command name, ignoring case.

        Raises:
            UnknownCommandError: If no handler matches
        """
        try:
            handler = self.handlers.get(CommandName(name.lower()))
        except ValueError:
            handler = None
        if handler is None:
            raise UnknownCommandError(name)
        return handler

    def dispatch(self, session: 'SessionManager', client: Client, command: Command) -> None:
        """Invoke the matching handler on behalf of a client."""
        handler = self.lookup(command.name)

        arguments = [client.id, client.nick]
        if command.value:
            arguments.append(command.value)

        logger.debug(f"Dispatching {command!r} for client {client.id}")
        handler(session, *arguments)
