"""
WebSocket Services Package

Room-addressed push channel used to deliver negotiation notifications.
"""

from .index import (
    ConnectionManager,
    WebSocketConnection,
    WebSocketMessage,
    MessageType,
    ConnectionStatus,
)

__all__ = [
    'ConnectionManager',
    'WebSocketConnection',
    'WebSocketMessage',
    'MessageType',
    'ConnectionStatus',
]
