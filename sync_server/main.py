from __future__ import annotations

import logging
import socket
import sys

import uvicorn

from sync_server.app import create_app
from sync_server.config import load_server_config
from sync_shared.protocol.errors import StartupError

logger = logging.getLogger(__name__)


def bind_socket(host: str, port: int) -> socket.socket:
    """Claim the listen address up front so a busy port fails before anything is served."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except OSError as exc:
        sock.close()
        raise StartupError(f"Cannot listen on {host}:{port}: {exc.strerror or exc}") from exc
    return sock


def run_server() -> None:
    config = load_server_config()
    logging.basicConfig(level=config["log_level"])

    try:
        sock = bind_socket(config["host"], config["port"])
    except StartupError as exc:
        logger.critical("Startup failed: %s", exc.message)
        sys.exit(1)

    app = create_app(config)
    logger.info("Sync server running on %s:%s", config["host"], config["port"])
    logger.info("WebSocket endpoint /ws, polling endpoints /health /api/messages /api/sounds /api/canvas")

    server = uvicorn.Server(
        uvicorn.Config(
            app,
            log_level=str(config["log_level"]).lower(),
            ws_max_size=config["max_body_size"],
        )
    )
    server.run(sockets=[sock])


if __name__ == "__main__":
    run_server()
