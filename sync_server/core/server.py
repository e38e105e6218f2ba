from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from fastapi import WebSocket, WebSocketDisconnect

from sync_shared.protocol import decode_msg, encode_msg, validator
from sync_shared.protocol.constants import MAX_FRAME_SIZE
from sync_shared.protocol.errors import ValidationError

from .connection import ConnectionContext
from .connection_manager import ConnectionManager

if TYPE_CHECKING:
    from sync_server.workers.dispatcher import EventDispatcher

logger = logging.getLogger(__name__)


class SocketServer:
    """Runs one WebSocket session: hydrate, read frames into the dispatcher, write the outbox."""

    def __init__(
        self,
        connection_manager: ConnectionManager,
        dispatcher: "EventDispatcher",
        max_frame_size: int = MAX_FRAME_SIZE,
        outbox_size: int = 256,
    ) -> None:
        self.connection_manager = connection_manager
        self.dispatcher = dispatcher
        self.max_frame_size = max_frame_size
        self.outbox_size = outbox_size

    async def serve(self, websocket: WebSocket) -> None:
        await websocket.accept()
        ctx = ConnectionContext(
            websocket=websocket,
            peername=_peername(websocket),
            outbox=asyncio.Queue(maxsize=self.outbox_size),
        )
        self.connection_manager.register(ctx)
        sender = asyncio.create_task(self._pump(ctx), name=f"sender-{ctx.connection_id}")
        ctx.sender_task = sender
        receiver = asyncio.create_task(self._receive(ctx), name=f"receiver-{ctx.connection_id}")
        try:
            # Either side finishing ends the session: the peer left or we stopped delivering.
            await asyncio.wait({sender, receiver}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            # Unregister before any await so a cancelled session never stays registered.
            self.connection_manager.unregister(ctx.connection_id)
            for task in (sender, receiver):
                task.cancel()
            await asyncio.wait({sender, receiver})
            try:
                await websocket.close()
            except Exception as exc:
                logger.debug("Error during websocket cleanup: %s", exc)

    async def _receive(self, ctx: ConnectionContext) -> None:
        try:
            while True:
                frame = await ctx.websocket.receive()
                if frame["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(frame.get("code", 1000))
                data = frame.get("text")
                if data is None:
                    data = frame.get("bytes")
                if data is None:
                    continue
                try:
                    message = decode_msg(data, self.max_frame_size)
                    validator.validate_msg(message)
                except ValidationError as exc:
                    logger.warning("Dropping frame from %s: %s", ctx.connection_id, exc.message)
                    continue
                self.dispatcher.submit(message, ctx)
        except WebSocketDisconnect as exc:
            logger.info("Client %s closed the connection (code=%s)", ctx.connection_id, exc.code)
        except (ConnectionResetError, ConnectionAbortedError, BrokenPipeError, OSError) as exc:
            logger.info("Client %s connection reset: %s", ctx.connection_id, exc)
        except RuntimeError as exc:
            # starlette raises RuntimeError once the socket is no longer connected
            logger.info("Client %s connection ended: %s", ctx.connection_id, exc)
        except Exception as exc:
            logger.exception("Unhandled error for %s: %s", ctx.connection_id, exc)

    async def _pump(self, ctx: ConnectionContext) -> None:
        while True:
            event = await ctx.outbox.get()
            try:
                await ctx.websocket.send_text(encode_msg(event))
            except Exception as exc:
                logger.warning("Delivery to %s failed: %s", ctx.connection_id, exc)
                self.connection_manager.unregister(ctx.connection_id)
                return
            finally:
                ctx.outbox.task_done()


def _peername(websocket: WebSocket) -> str:
    client = websocket.client
    return f"{client.host}:{client.port}" if client else "unknown"
