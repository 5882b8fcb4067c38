"""
vantageconnect - Python library for communicating with Vantage InFusion controllers.

This library provides async communication with InFusion controllers over the
local network: a persistent command connection that sends control commands and
decodes status updates into typed events, and on-demand discovery of areas and
devices from the controller's project backup.

Example:
    >>> from vantageconnect import ControllerClient, ControllerConfig, LoadChanged
    >>>
    >>> async def main():
    ...     config = ControllerConfig(host="192.168.1.100", omit="77,78")
    ...     async with ControllerClient(config) as client:
    ...         client.subscribe(LoadChanged, lambda e: print(e.vid, e.level))
    ...         for device in await client.discover():
    ...             print(device.name, device.area)
"""

from vantageconnect.channels import ChannelState, CommandChannel, DiscoveryChannel
from vantageconnect.client import ControllerClient
from vantageconnect.config import ControllerConfig, DeviceFilter
from vantageconnect.events import EventBus
from vantageconnect.exceptions import (
    ConfigurationError,
    ConnectionError,
    DiscoveryInProgressError,
    ParseError,
    ProtocolError,
    TimeoutError,
    TransportError,
    VantageConnectError,
)
from vantageconnect.models import (
    Area,
    BlindChanged,
    Device,
    DiscoveryComplete,
    Event,
    LoadChanged,
    ObjectType,
    StatusEvent,
    ThermostatMode,
    ThermostatModeChanged,
    ThermostatTemperatureChanged,
)
from vantageconnect.transport import AbstractTransport, AsyncTcpTransport

__version__ = "0.1.0"
__all__ = [
    # Client
    "ControllerClient",
    "ControllerConfig",
    "DeviceFilter",
    "EventBus",
    # Channels
    "ChannelState",
    "CommandChannel",
    "DiscoveryChannel",
    # Models
    "Area",
    "Device",
    "ObjectType",
    "ThermostatMode",
    # Events
    "Event",
    "StatusEvent",
    "LoadChanged",
    "BlindChanged",
    "ThermostatTemperatureChanged",
    "ThermostatModeChanged",
    "DiscoveryComplete",
    # Exceptions
    "VantageConnectError",
    "ProtocolError",
    "TimeoutError",
    "ConnectionError",
    "ParseError",
    "TransportError",
    "ConfigurationError",
    "DiscoveryInProgressError",
    # Transport
    "AbstractTransport",
    "AsyncTcpTransport",
    # Version
    "__version__",
]
