"""
WebSocket endpoint for the negotiation push channel

A client connects with its bearer token as the ``token`` query parameter and
is immediately placed in the room named after its user id (and, for shop
owners, the room named after its shop id). Anonymous connections are
accepted but join no rooms.
"""

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, Query
import logging
from typing import Optional

from core.database import get_session_factory
from core.dependencies import get_push_channel, resolve_token_user
from core.utils.response import Response
from services.identity import IdentityDirectory
from services.websockets import ConnectionManager

logger = logging.getLogger(__name__)
ws_router = APIRouter()


@ws_router.websocket("/v1/ws")
async def websocket_endpoint(websocket: WebSocket, token: Optional[str] = Query(None)):
    manager = websocket.app.state.push_channel
    connection_id = None

    user_id = None
    rooms = set()
    if token:
        async with get_session_factory()() as db:
            user = await resolve_token_user(token, db)
            if user is None:
                await websocket.close(code=1008, reason="Authentication failed")
                return
            user_id = str(user.id)
            rooms = await IdentityDirectory(db).push_rooms_for(user)

    try:
        connection_id = await manager.connect(websocket, user_id=user_id, allowed_rooms=rooms)

        while True:
            data = await websocket.receive_text()
            await manager.handle_message(connection_id, data)

    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected: {connection_id}")
    finally:
        if connection_id:
            await manager.disconnect(connection_id, "client_disconnect")


@ws_router.get("/v1/ws/stats")
async def get_websocket_stats(manager: ConnectionManager = Depends(get_push_channel)):
    return Response.success(data=manager.get_stats())
