"""
WebSocket Router

Streams system message hub events to System Admins and Super Admins.
"""

import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from folio.core.auth import UserPrincipal, load_principal
from folio.core.database import get_db_context
from folio.core.pubsub import (
    SYSTEM_MESSAGES_TOPIC,
    EventType,
    HubEvent,
    MessageHub,
    Subscription,
)
from folio.models.enums import UserRole

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ws", tags=["websocket"])

# Ping interval in seconds
PING_INTERVAL = 15


async def authenticate_websocket(websocket: WebSocket) -> UserPrincipal | None:
    """
    Authenticate a WebSocket connection.

    Checks for the credential in:
    1. access_token cookie (browser clients)
    2. token query parameter (fallback)

    Returns:
        UserPrincipal if the credential names an active user, None otherwise
    """
    token = websocket.cookies.get("access_token") or websocket.query_params.get("token")
    if not token:
        return None

    async with get_db_context() as db:
        user = await load_principal(db, token)

    if user is None or not user.is_active:
        return None
    return user


async def ping_loop(websocket: WebSocket, subscription: Subscription) -> None:
    """Send periodic pings to keep the connection alive."""
    try:
        while True:
            await asyncio.sleep(PING_INTERVAL)

            if websocket.client_state != WebSocketState.CONNECTED:
                break

            try:
                ping = HubEvent(type=EventType.PING, topic=subscription.topic, data={})
                await websocket.send_text(ping.to_json())
            except Exception as e:
                logger.debug(f"Ping failed for {subscription.id}: {e}")
                break
    except asyncio.CancelledError:
        pass


async def forward_loop(websocket: WebSocket, subscription: Subscription) -> None:
    """Relay hub events to the client until cancelled."""
    try:
        while True:
            event = await subscription.get()
            await websocket.send_text(event.to_json())
    except asyncio.CancelledError:
        pass
    except Exception as e:
        logger.debug(f"Forwarding stopped for {subscription.id}: {e}")


async def receive_loop(websocket: WebSocket) -> None:
    """Drain client messages; the stream is one-way apart from pongs."""
    while True:
        await websocket.receive_text()


@router.websocket("/system-messages")
async def system_messages_stream(websocket: WebSocket) -> None:
    """
    System message event stream.

    Outgoing messages:
        {
            "type": "created" | "updated" | "deleted" | "ping",
            "topic": "system_messages",
            "data": { ... },
            "timestamp": "ISO8601 timestamp"
        }
    """
    user = await authenticate_websocket(websocket)

    if user is None:
        await websocket.close(code=4001, reason="Unauthorized")
        return

    if not user.role.at_least(UserRole.SYSTEM_ADMIN):
        await websocket.close(code=4003, reason="Forbidden")
        return

    hub: MessageHub = websocket.app.state.message_hub

    # Subscription exists before the client sees the handshake
    subscription = await hub.subscribe(SYSTEM_MESSAGES_TOPIC)
    tasks: list[asyncio.Task[None]] = []

    try:
        await websocket.accept()
        logger.info(
            f"WebSocket {subscription.id} connected",
            extra={"user_id": str(user.user_id)},
        )

        tasks = [
            asyncio.create_task(ping_loop(websocket, subscription)),
            asyncio.create_task(forward_loop(websocket, subscription)),
        ]
        await receive_loop(websocket)
    except WebSocketDisconnect:
        logger.info(f"WebSocket {subscription.id} disconnected normally")
    except Exception as e:
        logger.error(f"WebSocket error for {subscription.id}: {e}")
    finally:
        for task in tasks:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        await subscription.unsubscribe()
