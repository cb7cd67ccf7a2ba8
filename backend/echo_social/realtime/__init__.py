"""Realtime chat delivery over WebSocket connections."""

from echo_social.realtime.delivery import ConnectionState, RealtimeConnection, deliver_chat_message
from echo_social.realtime.registry import ConnectionRegistry

__all__ = ["ConnectionRegistry", "ConnectionState", "RealtimeConnection", "deliver_chat_message"]
