from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, Dict, Optional, Tuple

from sync_server.core.connection import ConnectionContext
from sync_server.core.router import CommandRouter
from sync_shared.protocol.errors import ErrorCode, ProtocolError, StatusCode, ValidationError

logger = logging.getLogger(__name__)

Envelope = Tuple[Dict[str, Any], ConnectionContext]


class EventDispatcher:
    """
    Serializes every inbound event through one queue and one worker task.

    Handlers run strictly in arrival order and each one finishes its
    validate -> mutate -> broadcast sequence before the next event is taken, so
    all clients observe state transitions in the same order.
    """

    def __init__(self, router: CommandRouter) -> None:
        self.router = router
        self._task: Optional[asyncio.Task] = None
        self._queue: Optional[asyncio.Queue[Envelope]] = None

    def start(self) -> None:
        if self._task is None:
            queue: asyncio.Queue[Envelope] = asyncio.Queue()
            self._queue = queue
            self._task = asyncio.create_task(self._run(queue), name="event-dispatcher")

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
            self._queue = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def submit(self, message: Dict[str, Any], ctx: ConnectionContext) -> None:
        if self._queue is None:
            raise ProtocolError(
                StatusCode.SERVICE_UNAVAILABLE, ErrorCode.DISPATCHER_STOPPED, "Event dispatcher is not running"
            )
        self._queue.put_nowait((message, ctx))

    async def drain(self) -> None:
        """Wait until every submitted event has been processed."""
        if self._queue is not None:
            await self._queue.join()

    async def process(self, message: Dict[str, Any], ctx: ConnectionContext) -> Optional[Dict[str, Any]]:
        """Handle one event; rejected events are logged and dropped."""
        try:
            return await self.router.dispatch(message, ctx)
        except ValidationError as exc:
            logger.warning("Dropped %s from %s: %s", message.get("command"), ctx.connection_id, exc.message)
            return None

    async def _run(self, queue: asyncio.Queue[Envelope]) -> None:
        while True:
            message, ctx = await queue.get()
            try:
                await self.process(message, ctx)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.exception("Dispatcher failed on %s: %s", message.get("command"), exc)
            finally:
                queue.task_done()
