"""WebSocket-backed transport channel with a bounded outbound queue."""

import asyncio
import json
import logging
from typing import Optional

from fastapi import WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from chatserver.models.message import Message
from chatserver.core.exceptions import ChannelClosedError
from chatserver.core.transport import NORMAL_CLOSURE, POLICY_VIOLATION, Channel

logger = logging.getLogger(__name__)

FLUSH_TIMEOUT = 1.0


class WebSocketChannel(Channel):
    """
    Delivers messages to one WebSocket through a writer task.

    ``send`` only enqueues, so a slow client never holds up a broadcast. When
    the queue overflows the client is disconnected instead of losing messages.
    """

    def __init__(self, websocket: WebSocket, max_queue: int = 256, label: str = "client"):
        self.websocket = websocket
        self.label = label
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue)
        self._writer: Optional[asyncio.Task] = None
        self._closed = False
        self._closer: Optional[asyncio.Task] = None

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        """Start the writer task on the running event loop."""
        if self._writer is None:
            self._writer = asyncio.create_task(self._drain())

    def send(self, message: Message) -> None:
        if self._closed or self._closer is not None:
            raise ChannelClosedError(f"Channel to {self.label} is closed")
        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull as e:
            logger.warning(f"Outbound queue full for {self.label}, disconnecting")
            self._closer = asyncio.create_task(self.close(code=POLICY_VIOLATION, flush=False))
            raise ChannelClosedError(f"Outbound queue full for {self.label}") from e

    async def close(self, code: int = NORMAL_CLOSURE, flush: bool = True) -> None:
        if self._closed:
            return
        self._closed = True

        if flush and self._writer is not None and not self._writer.done():
            try:
                await asyncio.wait_for(self._queue.join(), timeout=FLUSH_TIMEOUT)
            except asyncio.TimeoutError:
                logger.warning(f"Gave up flushing {self._queue.qsize()} message(s) to {self.label}")

        if self._writer is not None:
            self._writer.cancel()
            try:
                await self._writer
            except asyncio.CancelledError:
                pass

        await self._close_socket(code)

    async def _drain(self) -> None:
        while True:
            message = await self._queue.get()
            try:
                await self.websocket.send_text(json.dumps(message.to_dict()))
            except (WebSocketDisconnect, RuntimeError, OSError) as e:
                logger.error(f"Failed to send message to {self.label}: {str(e)}")
                self._queue.task_done()
                self._discard_pending()
                return
            self._queue.task_done()

    def _discard_pending(self) -> None:
        self._closed = True
        while not self._queue.empty():
            self._queue.get_nowait()
            self._queue.task_done()

    async def _close_socket(self, code: int) -> None:
        if (self.websocket.application_state == WebSocketState.DISCONNECTED
                or self.websocket.client_state == WebSocketState.DISCONNECTED):
            return
        try:
            await self.websocket.close(code=code)
        except (RuntimeError, OSError) as e:
            logger.debug(f"Socket to {self.label} already gone: {str(e)}")
