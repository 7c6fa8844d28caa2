"""
Realtime app for WebSocket like notifications.

This app provides:
- A registry binding each authenticated user to its live connection
- A dispatcher pushing "you were liked" events over that connection
- The WebSocket consumer implementing the handshake protocol

Key Components:
    - registry.py: ConnectionRegistry (user identity -> channel name)
    - notifications.py: NotificationDispatcher (fire-and-forget push)
    - consumers/: WebSocket consumers (NotificationConsumer)

Usage:
    from realtime.registry import get_connection_registry
    from realtime.notifications import get_notification_dispatcher
    from realtime.consumers import NotificationConsumer
"""
