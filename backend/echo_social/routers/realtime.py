"""Realtime WebSocket endpoint."""

import logging

from fastapi import WebSocket, WebSocketDisconnect

from echo_social.realtime.delivery import RealtimeConnection

logger = logging.getLogger(__name__)


async def realtime_endpoint(websocket: WebSocket) -> None:
    """Accept a socket and feed its frames, in order, to its connection state machine."""

    await websocket.accept()
    connection = RealtimeConnection(websocket, websocket.app.state.context)
    try:
        while True:
            raw = await websocket.receive_text()
            await connection.handle_frame(raw)
    except WebSocketDisconnect as exc:
        logger.debug("realtime.disconnected user_id=%s code=%s", connection.user_id, exc.code)
    finally:
        connection.close()
