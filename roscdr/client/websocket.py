"""Run a Session over a WebSocket connection to the bridge."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import websockets
from loguru import logger

from .session import Session


class ChannelClosed(RuntimeError):
    """Raised when sending on a channel whose connection is gone."""


class WebSocketChannel:
    """Synchronous ``send`` on top of an asyncio WebSocket connection.

    Frames are queued and written by ``run_writer`` in submission order.
    """

    def __init__(self, ws: Any) -> None:
        self._ws = ws
        self._queue: asyncio.Queue[str | bytes] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, frame: str | bytes) -> None:
        if self._closed:
            raise ChannelClosed("websocket channel is closed")
        if not isinstance(frame, str):
            frame = bytes(frame)
        self._queue.put_nowait(frame)

    def close(self) -> None:
        self._closed = True

    async def run_writer(self) -> None:
        """Write queued frames until cancelled or the connection fails.

        A failed write closes the channel and is logged right away; frames
        still queued are never sent.
        """
        try:
            while True:
                frame = await self._queue.get()
                try:
                    await self._ws.send(frame)
                except websockets.ConnectionClosed as e:
                    logger.debug("Bridge connection closed while sending: {}", e)
                    raise
                except Exception:
                    logger.exception(
                        "Failed to send frame to bridge; {} frames dropped", self._queue.qsize()
                    )
                    raise
        finally:
            self._closed = True


async def pump_frames(ws: Any, session: Session) -> None:
    """Hand every received frame to the session until the connection ends."""
    async for frame in ws:
        session.handle_frame(frame)


@asynccontextmanager
async def connect(url: str, **kwargs: Any) -> AsyncIterator[Session]:
    """Open a bridge connection and yield a Session bound to it.

    The connection is closed when the block exits; it is never re-opened.
    Extra keyword arguments go to ``websockets.connect``.

    Example:
        async with connect("ws://127.0.0.1:9090") as session:
            client = await session.create_service_client("/add_two_ints", AddTwoInts.type)
    """
    async with websockets.connect(url, **kwargs) as ws:
        logger.debug("Connected to bridge at {}", url)
        channel = WebSocketChannel(ws)
        session = Session(channel)
        writer = asyncio.create_task(channel.run_writer())
        reader = asyncio.create_task(pump_frames(ws, session))
        reader.add_done_callback(lambda _: channel.close())
        try:
            yield session
        finally:
            channel.close()
            for task in (writer, reader):
                task.cancel()
            # Writer failures are logged by run_writer itself
            _, result = await asyncio.gather(writer, reader, return_exceptions=True)
            if isinstance(result, Exception) and not isinstance(
                result, websockets.ConnectionClosed
            ):
                logger.opt(exception=result).error("Bridge receive loop failed")
            logger.debug("Closed bridge connection to {}", url)
