"""Notification WebSocket consumer: handshake, identity binding and like pushes."""

import logging
from typing import Dict, Any, Optional

from channels.db import database_sync_to_async

from accounts.services import resolve_identity, resolve_user_by_email
from common.exceptions import InteractionError
from realtime.notifications import NOTIFICATION_EVENT
from realtime.registry import ConnectionRegistry, get_connection_registry
from .base import BaseConsumer

logger = logging.getLogger(__name__)

HANDSHAKE_FAILED_CLOSE_CODE = 4401
SESSION_REPLACED_CLOSE_CODE = 4409


class NotificationConsumer(BaseConsumer):
    """
    WebSocket consumer for like notifications.

    Protocol:
        client -> {"type": "handshake", "token": "<access token>"}
        server -> {"type": "handshake", "status": "ok", "userId": "<id>"}
        server -> {"type": "notification", "data": {"userId": "<liker id>"}}

    An invalid handshake closes the socket. A later handshake for the same
    user on another socket takes over the binding and this one is closed.
    """

    registry: Optional[ConnectionRegistry] = None

    def __init__(self, *args, registry: Optional[ConnectionRegistry] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.registry = registry if registry is not None else get_connection_registry()
        self.identity: Optional[str] = None

    async def on_disconnect(self, close_code):
        if self.identity is None:
            return
        self.registry.unbind(self.identity, self.channel_name)
        logger.info("User %s disconnected (code=%s)", self.identity, close_code)

    async def handle_message(self, msg_type: str, data: Dict[str, Any]):
        if msg_type == "handshake":
            await self._handle_handshake(data)
        elif self.identity is None:
            await self.send_error("Handshake required")
        else:
            await self.send_error(f"Unknown message type: {msg_type}")

    # ---------------------- Message Handlers ----------------------

    async def _handle_handshake(self, data: Dict[str, Any]):
        if self.identity is not None:
            await self.send_error("Handshake already completed")
            return

        try:
            user = await self._resolve_user(data.get("token"))
        except InteractionError as e:
            logger.info("Handshake rejected on %s: %s", self.channel_name, e.message)
            await self.close(code=HANDSHAKE_FAILED_CLOSE_CODE)
            return

        self.identity = str(user.id)
        previous = self.registry.bind(self.identity, self.channel_name)
        if previous and previous != self.channel_name:
            await self._evict(previous)

        await self.send_success("handshake", status="ok", userId=self.identity)
        logger.info("User %s connected", user.email)

    @database_sync_to_async
    def _resolve_user(self, token):
        return resolve_user_by_email(resolve_identity(token))

    async def _evict(self, channel_name: str):
        """Ask the replaced connection to close itself."""
        try:
            await self.channel_layer.send(channel_name, {"type": "session.replaced"})
        except Exception as e:
            logger.warning("Could not notify replaced channel %s: %r", channel_name, e)

    # ---------------------- Event Handlers (from channel.send) ----------------------

    async def notification(self, event):
        """Like notification from NotificationDispatcher."""
        await self.send_success(NOTIFICATION_EVENT, data={"userId": event.get("actor_user_id")})

    async def session_replaced(self, event):
        """Another connection completed a handshake for the same user."""
        logger.info("Connection %s for user %s replaced", self.channel_name, self.identity)
        await self.send_success("session_replaced")
        await self.close(code=SESSION_REPLACED_CLOSE_CODE)
