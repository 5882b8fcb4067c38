"""
Controller connections.

- CommandChannel: persistent, self-reconnecting control connection that
  decodes status lines into events
- DiscoveryChannel: one-shot backup retrieval returning the device list
"""

from vantageconnect.channels.command import CommandChannel
from vantageconnect.channels.discovery import DiscoveryChannel, FailureKind, classify_failure
from vantageconnect.channels.state import ChannelState

__all__ = [
    "ChannelState",
    "CommandChannel",
    "DiscoveryChannel",
    "FailureKind",
    "classify_failure",
]
