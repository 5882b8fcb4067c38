"""Connection states shared by the command and discovery channels."""

from __future__ import annotations

from enum import Enum, auto


class ChannelState(Enum):
    """Controller channel connection states."""

    DISCONNECTED = auto()
    """Initial state, and the state entered after any close or fatal error."""

    CONNECTING = auto()
    """TCP connection attempt in progress."""

    CONNECTED = auto()
    """TCP connection established."""

    AUTHENTICATING = auto()
    """Login sent."""

    READY = auto()
    """Subscribed (command) or requesting the backup (discovery)."""
