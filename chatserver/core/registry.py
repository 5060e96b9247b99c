"""In-memory registry of connected clients."""

import logging
from typing import Dict, Iterator, List, Optional

from chatserver.models.client import Client
from chatserver.core.exceptions import ChatError, NickInUseError, StaleClientError

logger = logging.getLogger(__name__)


class ClientRegistry:
    """
    Mapping from client id to Client, with a nick index.

    The registry does no locking of its own; the session manager serializes
    every call. Both maps always hold exactly the same set of clients.
    """

    def __init__(self):
        self._clients: Dict[str, Client] = {}
        self._nicks: Dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._clients)

    def __contains__(self, client_id: str) -> bool:
        return client_id in self._clients

    def __iter__(self) -> Iterator[Client]:
        # snapshot, so callers may mutate the registry while iterating
        return iter(list(self._clients.values()))

    def add(self, client: Client) -> None:
        """
        Register a newly connected client.

        Raises:
            ChatError: If the id is already registered
            NickInUseError: If the client's nick is already taken
        """
        if client.id in self._clients:
            raise ChatError(f"Client {client.id} is already registered")
        if client.nick in self._nicks:
            raise NickInUseError(client.nick)

        self._clients[client.id] = client
        self._nicks[client.nick] = client.id

    def remove(self, client_id: str) -> Optional[Client]:
        """Remove a client, returning it, or None if it was not registered."""
        client = self._clients.pop(client_id, None)
        if client is not None:
            self._nicks.pop(client.nick, None)
        return client

    def get(self, client_id: str) -> Optional[Client]:
        return self._clients.get(client_id)

    def find_by_nick(self, nick: str) -> Optional[Client]:
        client_id = self._nicks.get(nick)
        return self._clients.get(client_id) if client_id is not None else None

    def is_taken(self, name: str) -> bool:
        """Check whether a name is in use as either a client id or a nick."""
        return name in self._clients or name in self._nicks

    def nicks(self) -> List[str]:
        """Nicks of all clients in registry order."""
        return [client.nick for client in self._clients.values()]

    def rename(self, client_id: str, new_nick: str) -> str:
        """
        Change a client's nick as a single check-and-set.

        Args:
            client_id: ID of the client to rename
            new_nick: Requested nick

        Returns:
            The client's previous nick

        Raises:
            StaleClientError: If the client is not registered
            NickInUseError: If another client holds the nick
        """
        client = self._clients.get(client_id)
        if client is None:
            raise StaleClientError(f"Client {client_id} is not connected")

        owner = self._nicks.get(new_nick)
        if owner is not None and owner != client_id:
            raise NickInUseError(new_nick)

        old_nick = client.nick
        del self._nicks[old_nick]
        client.nick = new_nick
        self._nicks[new_nick] = client_id
        logger.debug(f"Renamed client {client_id}: {old_nick} -> {new_nick}")
        return old_nick

    def clear(self) -> List[Client]:
        """Remove every client, returning them."""
        clients = list(self._clients.values())
        self._clients.clear()
        self._nicks.clear()
        return clients
