from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Request, WebSocket

from .snapshot import SnapshotAPI

router = APIRouter(prefix="", tags=["snapshot"])


def get_snapshot_api(request: Request) -> SnapshotAPI:
    return request.app.state.snapshot_api


@router.get("/")
async def root(request: Request) -> Dict[str, Any]:
    return {
        "message": request.app.title,
        "version": request.app.version,
        "endpoints": {
            "websocket": "/ws",
            "health": "/health",
            "messages": "/api/messages",
            "sounds": "/api/sounds",
            "canvas": "/api/canvas",
        },
    }


@router.get("/health")
async def health(api: SnapshotAPI = Depends(get_snapshot_api)) -> Dict[str, Any]:
    return api.get_health()


@router.get("/api/messages")
async def messages(api: SnapshotAPI = Depends(get_snapshot_api)) -> List[Dict[str, Any]]:
    return api.get_messages()


@router.get("/api/sounds")
async def sounds(api: SnapshotAPI = Depends(get_snapshot_api)) -> List[Dict[str, Any]]:
    return api.get_sounds()


@router.get("/api/canvas")
async def canvas(api: SnapshotAPI = Depends(get_snapshot_api)) -> Dict[str, Any]:
    return api.get_canvas()


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    await websocket.app.state.socket_server.serve(websocket)
