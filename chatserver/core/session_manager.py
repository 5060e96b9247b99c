"""Session manager owning the client registry and broadcast fan-out."""

import asyncio
import logging
import uuid
from typing import Any, List, Optional

from chatserver.models.client import Client
from chatserver.models.message import ErrorMessage, Message, Notice, UserConnected, UserDisconnected
from chatserver.core.commands import NickPolicy
from chatserver.core.dispatcher import CommandDispatcher, parse_payload
from chatserver.core.exceptions import (
    ChannelClosedError,
    ProtocolError,
    SessionClosedError,
    StaleClientError,
    ValidationError,
)
from chatserver.core.registry import ClientRegistry
from chatserver.core.transport import GOING_AWAY, Channel

logger = logging.getLogger(__name__)


class SessionManager:
    """
    Tracks connected clients and executes their commands.

    Every operation that reads or writes the registry runs under a single
    ``asyncio.Lock``. Handlers and broadcast never await, so a command is
    applied and announced as one atomic unit.
    """

    def __init__(self, dispatcher: Optional[CommandDispatcher] = None,
                 nick_policy: Optional[NickPolicy] = None):
        self.registry = ClientRegistry()
        self.dispatcher = dispatcher or CommandDispatcher()
        self.nick_policy = nick_policy or NickPolicy()
        self._mutex = asyncio.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def connect(self, channel: Channel) -> str:
        """
        Register a new client and announce it to everyone, itself included.

        Args:
            channel: Transport channel for sending to the client

        Returns:
            The server-assigned client id

        Raises:
            SessionClosedError: If the manager has been shut down
        """
        async with self._mutex:
            if self._closed:
                raise SessionClosedError("Server is shutting down")

            client_id = self._allocate_id()
            client = Client(id=client_id, nick=client_id, channel=channel)
            self.registry.add(client)
            logger.info(f"Client {client_id} connected")

            self.broadcast(UserConnected(nick=client.nick))
        return client_id

    async def disconnect(self, client_id: str) -> None:
        """
        Remove a client and announce its departure to the remaining clients.

        Disconnecting an unknown or already removed client does nothing.
        """
        async with self._mutex:
            client = self.registry.remove(client_id)
            if client is None:
                logger.debug(f"Ignoring disconnect for unknown client {client_id}")
                return

            logger.info(f"Client {client_id} ({client.nick}) disconnected")
            self.broadcast(UserDisconnected(nick=client.nick))

    async def handle_message(self, client_id: str, payload: Any) -> None:
        """
        Process an incoming payload from a client.

        Protocol and validation failures are reported to the sender only.

        Args:
            client_id: ID of the sending client
            payload: Raw text or a decoded ``{command, value}`` record
        """
        async with self._mutex:
            client = self.registry.get(client_id)
            if client is None:
                logger.warning(f"Dropping message from unknown client {client_id}")
                return

            try:
                command = parse_payload(payload)
                self.dispatcher.dispatch(self, client, command)
            except (ProtocolError, ValidationError) as e:
                logger.info(f"Rejected message from {client.nick}: {str(e)}")
                self.send_to(client_id, ErrorMessage(text=str(e)))
            except StaleClientError as e:
                logger.warning(f"Ignoring stale reference from {client_id}: {str(e)}")

    async def notice(self, text: str) -> None:
        """Broadcast a server announcement."""
        async with self._mutex:
            self.broadcast(Notice(text=text))

    async def shutdown(self) -> None:
        """
        Announce shutdown, then release every client and its channel.

        Safe to call repeatedly and with no clients connected.
        """
        async with self._mutex:
            if self._closed:
                return
            self._closed = True

            self.broadcast(Notice.shutdown())
            clients = self.registry.clear()

        logger.info(f"Session manager shut down, releasing {len(clients)} client(s)")
        await asyncio.gather(*(client.channel.close(code=GOING_AWAY) for client in clients))

    def broadcast(self, message: Message) -> None:
        """Send a message to every connected client."""
        for client in self.registry:
            self._deliver(client, message)

    def send_to(self, client_id: str, message: Message) -> None:
        """Send a message to a single client."""
        client = self.registry.get(client_id)
        if client is None:
            logger.warning(f"Cannot send {message.type.value} to unknown client {client_id}")
            return
        self._deliver(client, message)

    def get_client(self, client_id: str) -> Optional[Client]:
        return self.registry.get(client_id)

    def find_by_nick(self, nick: str) -> Optional[Client]:
        return self.registry.find_by_nick(nick)

    def nicks(self) -> List[str]:
        return self.registry.nicks()

    def rename(self, client_id: str, new_nick: str) -> str:
        """Change a client's nick, returning the old one."""
        return self.registry.rename(client_id, new_nick)

    def _deliver(self, client: Client, message: Message) -> None:
        try:
            client.send(message)
        except ChannelClosedError:
            logger.debug(f"Skipping closed channel of client {client.id}")
        except Exception as e:
            logger.error(f"Failed to send message to {client.id}: {str(e)}")

    def _allocate_id(self) -> str:
        client_id = uuid.uuid4().hex
        while self.registry.is_taken(client_id):
            client_id = uuid.uuid4().hex
        return client_id
