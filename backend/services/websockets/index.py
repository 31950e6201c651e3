"""
WebSocket push channel

Connections join rooms (topics) named after a user id or a shop id, and the
server addresses messages to a room. Delivery is best effort: a message sent
to a room nobody is connected to is dropped, failed sends are not retried and
nothing is queued.
"""

import json
import logging
import uuid
from typing import Dict, Iterable, Optional, Set, Any
from datetime import datetime, timedelta, timezone
from dataclasses import dataclass, field
from enum import Enum

from fastapi import WebSocket

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConnectionStatus(Enum):
    """WebSocket connection status"""
    CONNECTED = "connected"
    DISCONNECTING = "disconnecting"
    DISCONNECTED = "disconnected"


class MessageType(Enum):
    """WebSocket message types"""
    # System messages
    PING = "ping"
    PONG = "pong"
    CONNECT = "connect"
    ERROR = "error"

    # Room membership
    JOIN_ROOM = "joinRoom"
    LEAVE_ROOM = "leaveRoom"
    ROOM_RESPONSE = "roomResponse"

    # Business messages
    NEGOTIATION_OUTCOME = "negotiationOutcome"
    NEGOTIATION_INFO = "negotiationInfo"


@dataclass
class WebSocketMessage:
    """Structured WebSocket message"""
    type: MessageType
    data: Dict[str, Any] = field(default_factory=dict)
    room: Optional[str] = None
    timestamp: Optional[datetime] = None
    message_id: Optional[str] = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = _utcnow()
        if self.message_id is None:
            self.message_id = str(uuid.uuid4())

    def to_json(self) -> str:
        """Convert message to JSON string"""
        return json.dumps({
            "type": self.type.value,
            "data": self.data,
            "room": self.room,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "message_id": self.message_id
        }, default=str)


@dataclass
class WebSocketConnection:
    """WebSocket connection with the rooms it may join and has joined"""
    websocket: WebSocket
    connection_id: str
    user_id: Optional[str] = None
    status: ConnectionStatus = ConnectionStatus.CONNECTED
    connected_at: datetime = field(default_factory=_utcnow)
    allowed_rooms: Set[str] = field(default_factory=set)
    rooms: Set[str] = field(default_factory=set)
    failed_messages: int = 0

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @property
    def connection_duration(self) -> timedelta:
        return _utcnow() - self.connected_at


class ConnectionManager:
    """Tracks live connections and the rooms they listen on"""

    def __init__(self):
        self.connections: Dict[str, WebSocketConnection] = {}
        self.room_members: Dict[str, Set[str]] = {}  # room -> connection_ids
        self.is_shut_down = False

        self.stats = {
            "total_connections": 0,
            "total_messages_sent": 0,
            "total_messages_received": 0,
            "connection_errors": 0,
            "rejected_joins": 0,
        }

    async def connect(
        self,
        websocket: WebSocket,
        user_id: Optional[str] = None,
        allowed_rooms: Iterable[str] = (),
        connection_id: Optional[str] = None,
    ) -> str:
        """Accept a WebSocket and join every room the caller is entitled to"""
        await websocket.accept()

        if connection_id is None:
            connection_id = str(uuid.uuid4())

        connection = WebSocketConnection(
            websocket=websocket,
            connection_id=connection_id,
            user_id=user_id,
            allowed_rooms=set(allowed_rooms),
        )
        self.connections[connection_id] = connection
        self.stats["total_connections"] += 1

        for room in sorted(connection.allowed_rooms):
            self._add_member(connection, room)

        logger.info(f"WebSocket connected: {connection_id}, User: {user_id}, "
                    f"Rooms: {sorted(connection.rooms)}, Total: {len(self.connections)}")

        welcome_message = WebSocketMessage(
            type=MessageType.CONNECT,
            data={
                "connection_id": connection_id,
                "authenticated": connection.is_authenticated,
                "user_id": user_id,
                "rooms": sorted(connection.rooms),
                "server_time": _utcnow().isoformat()
            },
        )
        await self._send_message(connection, welcome_message)

        return connection_id

    async def disconnect(self, connection_id: str, reason: str = "normal_closure"):
        """Forget a connection and its room memberships"""
        connection = self.connections.pop(connection_id, None)
        if connection is None:
            return

        connection.status = ConnectionStatus.DISCONNECTING
        for room in list(connection.rooms):
            self._remove_member(connection, room)
        connection.status = ConnectionStatus.DISCONNECTED

        logger.info(f"WebSocket disconnected: {connection_id}, User: {connection.user_id}, "
                    f"Duration: {connection.connection_duration}, Reason: {reason}")

    def _add_member(self, connection: WebSocketConnection, room: str):
        connection.rooms.add(room)
        self.room_members.setdefault(room, set()).add(connection.connection_id)

    def _remove_member(self, connection: WebSocketConnection, room: str):
        connection.rooms.discard(room)
        members = self.room_members.get(room)
        if members is not None:
            members.discard(connection.connection_id)
            if not members:
                del self.room_members[room]

    def join_room(self, connection_id: str, room: str) -> bool:
        """Join a room; only rooms granted at connect time are allowed"""
        connection = self.connections.get(connection_id)
        if connection is None:
            return False
        if room not in connection.allowed_rooms:
            self.stats["rejected_joins"] += 1
            logger.warning(f"Connection {connection_id} refused room {room}")
            return False
        self._add_member(connection, room)
        return True

    def leave_room(self, connection_id: str, room: str) -> bool:
        connection = self.connections.get(connection_id)
        if connection is None or room not in connection.rooms:
            return False
        self._remove_member(connection, room)
        return True

    async def _send_message(self, connection: WebSocketConnection, message: WebSocketMessage) -> bool:
        """Send once; a failed send drops the connection"""
        try:
            await connection.websocket.send_text(message.to_json())
            self.stats["total_messages_sent"] += 1
            return True
        except Exception as e:
            logger.warning(f"Error sending message to {connection.connection_id}: {e}")
            connection.failed_messages += 1
            self.stats["connection_errors"] += 1
            await self.disconnect(connection.connection_id, "send_error")
            return False

    async def send_to_connection(self, connection_id: str, message: WebSocketMessage) -> bool:
        connection = self.connections.get(connection_id)
        if connection is None:
            return False
        return await self._send_message(connection, message)

    async def send_to_room(self, room: str, message: WebSocketMessage) -> int:
        """Send to every connection in a room; returns how many received it"""
        if self.is_shut_down:
            raise RuntimeError("Push channel has been shut down")

        message.room = room
        sent_count = 0
        for connection_id in list(self.room_members.get(room, ())):
            if await self.send_to_connection(connection_id, message):
                sent_count += 1

        if sent_count == 0:
            logger.debug(f"No live connections in room: {room}")
        return sent_count

    async def handle_message(self, connection_id: str, raw_message: str):
        """Handle an incoming client message"""
        connection = self.connections.get(connection_id)
        if connection is None:
            return

        self.stats["total_messages_received"] += 1

        try:
            message_data = json.loads(raw_message)
            message_type = MessageType(message_data.get("type", ""))
            data = message_data.get("data") or {}

            if message_type == MessageType.PING:
                reply = WebSocketMessage(
                    type=MessageType.PONG,
                    data={
                        "client_timestamp": data.get("timestamp"),
                        "server_timestamp": _utcnow().isoformat()
                    },
                )
            elif message_type in (MessageType.JOIN_ROOM, MessageType.LEAVE_ROOM):
                room = str(data.get("room", ""))
                if message_type == MessageType.JOIN_ROOM:
                    success = self.join_room(connection_id, room)
                else:
                    success = self.leave_room(connection_id, room)
                reply = WebSocketMessage(
                    type=MessageType.ROOM_RESPONSE,
                    data={"success": success, "room": room, "action": message_type.value},
                )
            else:
                reply = WebSocketMessage(
                    type=MessageType.ERROR,
                    data={"error": f"Unsupported message type: {message_type.value}"},
                )

        except json.JSONDecodeError:
            reply = WebSocketMessage(
                type=MessageType.ERROR,
                data={"error": "Invalid JSON format"},
            )
        except (ValueError, AttributeError) as e:
            reply = WebSocketMessage(
                type=MessageType.ERROR,
                data={"error": f"Invalid message: {str(e)}"},
            )

        await self._send_message(connection, reply)

    def get_stats(self) -> Dict[str, Any]:
        return {
            **self.stats,
            "active_connections": len(self.connections),
            "rooms": len(self.room_members),
        }

    async def shutdown(self):
        """Close every connection and refuse further sends"""
        logger.info("Shutting down WebSocket connection manager...")
        self.is_shut_down = True
        for connection_id in list(self.connections.keys()):
            connection = self.connections[connection_id]
            try:
                await connection.websocket.close(code=1001)
            except Exception as e:
                logger.debug(f"Could not close {connection_id}: {e}")
            await self.disconnect(connection_id, "server_shutdown")
        logger.info("WebSocket connection manager shutdown complete")
