"""
In-process table of live notification connections.

Each authenticated user identity maps to at most one channel name (the
Channels consumer's ``channel_name``). The table is shared between sync
request threads (the notification dispatcher) and async consumers on the
event loop, so every access goes through one lock.

Only this process's connections are known here; fan-out across several
server processes is not supported.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class ConnectionRegistry:
    """Maps user identity -> channel name of its current live connection."""

    def __init__(self):
        self._lock = threading.Lock()
        self._bindings: Dict[str, str] = {}

    def bind(self, identity, channel: str) -> Optional[str]:
        """
        Install or replace the binding for identity.

        Returns:
            The previously bound channel, if any. It is not closed here;
            closing it is up to the caller.
        """
        key = str(identity)
        with self._lock:
            previous = self._bindings.get(key)
            self._bindings[key] = channel

        if previous and previous != channel:
            logger.info("Binding for %s replaced (%s -> %s)", key, previous, channel)
        else:
            logger.info("Bound %s to %s", key, channel)
        return previous

    def unbind(self, identity, channel: str) -> bool:
        """
        Remove the binding only if channel is still the registered one.

        A connection that has already been replaced by a newer handshake
        leaves the newer binding in place.
        """
        key = str(identity)
        with self._lock:
            if self._bindings.get(key) != channel:
                return False
            del self._bindings[key]

        logger.info("Unbound %s from %s", key, channel)
        return True

    def lookup(self, identity) -> Optional[str]:
        with self._lock:
            return self._bindings.get(str(identity))

    def __contains__(self, identity) -> bool:
        return self.lookup(identity) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._bindings)


_registry = ConnectionRegistry()


def get_connection_registry() -> ConnectionRegistry:
    """Process-wide registry used by default by consumers and the dispatcher."""
    return _registry
