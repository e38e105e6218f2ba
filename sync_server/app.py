from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sync_server.api import SnapshotAPI, router
from sync_server.config import SERVER_CONFIG
from sync_server.core import CommandRouter, ConnectionManager, SocketServer
from sync_server.services import CanvasService, ChatService, NoiseService
from sync_server.storage import SharedStateStore
from sync_server.workers import EventDispatcher
from sync_shared.protocol.commands import MsgType

APP_TITLE = "Captive Portal Sync Server"
APP_VERSION = "1.0.0"


def create_app(config: Optional[Dict[str, Any]] = None) -> FastAPI:
    config = {**SERVER_CONFIG, **(config or {})}

    store = SharedStateStore(
        message_limit=config["message_limit"],
        sound_limit=config["sound_limit"],
        message_tail=config["message_tail"],
        sound_tail=config["sound_tail"],
        max_clip_size=config["max_clip_size"],
    )
    connection_manager = ConnectionManager(store)

    chat_service = ChatService(store, connection_manager)
    noise_service = NoiseService(store, connection_manager)
    canvas_service = CanvasService(store, connection_manager)

    command_router = CommandRouter()
    command_router.register(MsgType.CHAT_MESSAGE, chat_service.handle_message)
    command_router.register(MsgType.NOISE_ADD, noise_service.handle_add)
    command_router.register(MsgType.CANVAS_UPDATE, canvas_service.handle_update)
    command_router.register(MsgType.CANVAS_CLEAR, canvas_service.handle_clear)

    dispatcher = EventDispatcher(command_router)
    socket_server = SocketServer(
        connection_manager,
        dispatcher,
        max_frame_size=config["max_body_size"],
        outbox_size=config["outbox_size"],
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        dispatcher.start()
        try:
            yield
        finally:
            await dispatcher.stop()

    app = FastAPI(title=APP_TITLE, version=APP_VERSION, lifespan=lifespan)

    # The portal page may be served from another origin; reads are public.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.state.config = config
    app.state.store = store
    app.state.connection_manager = connection_manager
    app.state.dispatcher = dispatcher
    app.state.socket_server = socket_server
    app.state.snapshot_api = SnapshotAPI(store, connection_manager)

    app.include_router(router)
    return app


__all__ = ["create_app", "APP_TITLE", "APP_VERSION"]
