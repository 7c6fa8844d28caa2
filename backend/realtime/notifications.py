"""
Notification helpers for pushing WebSocket messages to connected users.

This module provides:
- The channel-layer event for "you were liked"
- NotificationDispatcher: registry lookup + best-effort send

Delivery is fire-and-forget. The event is queued on the channel layer with
a short timeout and the consumer owning the channel writes it to the socket,
so a slow or stalled recipient never holds up the request that liked them.
Failures are logged and dropped, never retried or raised.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Any, Optional

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings

from .registry import ConnectionRegistry, get_connection_registry

logger = logging.getLogger(__name__)

NOTIFICATION_EVENT = "notification"


def build_like_event(target_user_id, actor_user_id) -> Dict[str, Any]:
    """Channel-layer event handled by NotificationConsumer.notification()."""
    return {
        "type": NOTIFICATION_EVENT,
        "target_user_id": str(target_user_id),
        "actor_user_id": str(actor_user_id),
    }


class NotificationDispatcher:
    """
    Sends "user X liked user Y" events to Y's live connection, if any.

    Args:
        registry: ConnectionRegistry to look recipients up in
        channel_layer: channel layer to send through (defaults to the configured one)
        send_timeout: seconds to wait for the layer to accept the event
    """

    def __init__(
        self,
        registry: Optional[ConnectionRegistry] = None,
        channel_layer=None,
        send_timeout: Optional[float] = None,
    ):
        self.registry = registry if registry is not None else get_connection_registry()
        self._channel_layer = channel_layer
        if send_timeout is None:
            send_timeout = settings.NOTIFICATION_SEND_TIMEOUT
        self.send_timeout = send_timeout

    @property
    def channel_layer(self):
        if self._channel_layer is not None:
            return self._channel_layer
        return get_channel_layer()

    def notify_liked(self, target_user_id, actor_user_id) -> bool:
        """
        Push a like notification from sync code (views, services).

        Returns:
            True if the event was handed to the channel layer, False otherwise
        """
        channel_name = self.registry.lookup(target_user_id)
        if channel_name is None:
            logger.debug("User %s not connected, skipping notification", target_user_id)
            return False

        payload = build_like_event(target_user_id, actor_user_id)
        try:
            async_to_sync(self._send)(channel_name, payload)
        except Exception as e:
            logger.warning(
                "Dropped notification for user %s on %s: %r",
                target_user_id, channel_name, e
            )
            return False

        logger.info("User %s notified of like by %s", target_user_id, actor_user_id)
        return True

    async def _send(self, channel_name: str, payload: Dict[str, Any]):
        channel_layer = self.channel_layer
        if channel_layer is None:
            raise RuntimeError("No channel layer configured")

        logger.debug("WS -> %s: %s", channel_name, payload)
        await asyncio.wait_for(
            channel_layer.send(channel_name, payload),
            timeout=self.send_timeout,
        )


_dispatcher: Optional[NotificationDispatcher] = None


def get_notification_dispatcher() -> NotificationDispatcher:
    """Process-wide dispatcher bound to the default connection registry."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = NotificationDispatcher()
    return _dispatcher
