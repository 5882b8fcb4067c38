"""
InFusion Controller Client.

This module provides the main client interface for a Vantage InFusion
controller. The client combines the two controller connections:

    CommandChannel (port 3001)    persistent; status events + commands
    DiscoveryChannel (port 2001)  on demand; project backup -> devices

Status events from the command channel and DiscoveryComplete from the
discovery channel are published on the client's EventBus.

Example:
    >>> from vantageconnect import ControllerClient, ControllerConfig, LoadChanged
    >>>
    >>> async def main():
    ...     config = ControllerConfig(host="192.168.1.100")
    ...     async with ControllerClient(config) as client:
    ...         client.subscribe(LoadChanged, lambda e: print(e.vid, e.level))
    ...         devices = await client.discover()
    ...         await client.set_load_level(devices[0].vid, 50)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, TypeVar

from vantageconnect.channels.command import CommandChannel
from vantageconnect.channels.discovery import DiscoveryChannel
from vantageconnect.events import EventBus
from vantageconnect.models.events import DiscoveryComplete, Event
from vantageconnect.protocol.constants import ProtocolConstants

if TYPE_CHECKING:
    from types import TracebackType

    from vantageconnect.channels.state import ChannelState
    from vantageconnect.config import ControllerConfig
    from vantageconnect.models.records import Device, ThermostatMode
    from vantageconnect.parsers.backup_parser import BackupParser
    from vantageconnect.transport.abc import AbstractTransport

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Event)


class ControllerClient:
    """
    Client for a Vantage InFusion controller.

    The command connection is opened by connect() and maintained in the
    background until disconnect(), reconnecting after every drop. All
    command methods are fire-and-forget: they return True when the line
    was written and False when it was dropped (not connected, or the write
    failed). Replies arrive later as events.

    Attributes:
        config: Controller configuration.
        state: Command channel connection state.
        is_ready: Whether commands are currently accepted.
        events: Event bus carrying status and discovery events.

    Example:
        >>> client = ControllerClient(ControllerConfig(host="192.168.1.100"))
        >>> await client.connect()
        >>> await client.wait_ready(timeout=5.0)
        >>> await client.get_load_status("12")
        >>> await client.disconnect()
    """

    def __init__(
        self,
        config: ControllerConfig,
        *,
        command_transport: AbstractTransport | None = None,
        discovery_transport: AbstractTransport | None = None,
        parser: BackupParser | None = None,
        events: EventBus | None = None,
    ) -> None:
        """
        Initialize the controller client.

        Args:
            config: Validated controller configuration.
            command_transport: Transport for the command channel; defaults
                to TCP on config.command_port.
            discovery_transport: Transport for discovery; defaults to TCP
                on config.discovery_port.
            parser: Backup parser used by discovery.
            events: Event bus to publish on; a new one by default.
        """
        self._config = config
        self._events = events or EventBus()
        self._command = CommandChannel(
            config,
            transport=command_transport,
            on_event=self._events.publish,
        )
        self._discovery = DiscoveryChannel(
            config,
            transport=discovery_transport,
            parser=parser,
            on_complete=self._discovery_complete,
        )

    @property
    def config(self) -> ControllerConfig:
        """Get the controller configuration."""
        return self._config

    @property
    def state(self) -> ChannelState:
        """Get the command channel state."""
        return self._command.state

    @property
    def is_ready(self) -> bool:
        """Check if commands are accepted."""
        return self._command.is_ready

    @property
    def is_discovering(self) -> bool:
        """Check if a discovery run is in progress."""
        return self._discovery.is_running

    @property
    def events(self) -> EventBus:
        """Get the event bus."""
        return self._events

    @property
    def command_channel(self) -> CommandChannel:
        """Get the command channel."""
        return self._command

    @property
    def discovery_channel(self) -> DiscoveryChannel:
        """Get the discovery channel."""
        return self._discovery

    def subscribe(self, event_type: type[E], callback: Callable[[E], None]) -> Callable[[], None]:
        """
        Subscribe to an event class (and its subclasses).

        Returns:
            Function that removes the subscription.
        """
        return self._events.subscribe(event_type, callback)

    async def connect(self) -> None:
        """
        Start the command connection.

        Returns immediately; the connection is established (and
        re-established after drops) in the background.
        """
        logger.info("Starting controller client for %s", self._config.host)
        await self._command.start()

    async def disconnect(self) -> None:
        """Stop the command connection."""
        await self._command.stop()

    async def wait_ready(self, timeout: float | None = None) -> bool:
        """
        Wait until commands are accepted.

        Returns:
            True if ready, False if the timeout expired first.
        """
        return await self._command.wait_ready(timeout)

    async def discover(self) -> list[Device]:
        """
        Retrieve the device list from the controller's project backup.

        Also publishes DiscoveryComplete with the same devices. Failures
        yield an empty list.

        Returns:
            Devices after the omit list and VID range are applied.

        Raises:
            DiscoveryInProgressError: If a discovery is already running.
        """
        return await self._discovery.run()

    # ===== Loads =====

    async def get_load_status(self, vid: str) -> bool:
        """Request a load's level; the reply arrives as LoadChanged."""
        return await self._command.get_load_status(vid)

    async def set_load_level(
        self,
        vid: str,
        level: float,
        ramp_seconds: float = ProtocolConstants.DEFAULT_RAMP_SECONDS,
    ) -> bool:
        """
        Ramp a load to a level.

        Args:
            vid: Load identifier.
            level: Target level, 0-100.
            ramp_seconds: Ramp duration.
        """
        return await self._command.set_load_level(vid, level, ramp_seconds)

    # ===== Blinds =====

    async def set_blind_position(self, vid: str, position: float) -> bool:
        """Move a blind to a position, 0-100."""
        return await self._command.set_blind_position(vid, position)

    async def get_blind_position(self, vid: str) -> bool:
        """Request a blind's position; the reply arrives as BlindChanged."""
        return await self._command.get_blind_position(vid)

    # ===== Thermostats =====

    async def get_thermostat_state(self, vid: str) -> bool:
        """
        Request a thermostat's temperature, mode and both setpoints.

        Replies arrive as ThermostatTemperatureChanged and
        ThermostatModeChanged events.
        """
        return await self._command.get_thermostat_state(vid)

    async def set_thermostat_mode(self, vid: str, mode: ThermostatMode | int) -> bool:
        """Set a thermostat's operating mode."""
        return await self._command.set_thermostat_mode(vid, mode)

    async def set_thermostat_temperature(
        self,
        vid: str,
        value: float,
        mode: ThermostatMode | int,
        heating_threshold: float,
        cooling_threshold: float,
    ) -> bool:
        """
        Set a thermostat setpoint.

        In AUTO mode only a value above the cooling threshold (cool
        setpoint) or below the heating threshold (heat setpoint) is
        written.

        Args:
            vid: Thermostat identifier.
            value: Target temperature.
            mode: Current operating mode.
            heating_threshold: Current heat setpoint.
            cooling_threshold: Current cool setpoint.

        Returns:
            True if a command was written.
        """
        return await self._command.set_thermostat_temperature(
            vid, value, mode, heating_threshold, cooling_threshold
        )

    def _discovery_complete(self, devices: list[Device]) -> None:
        self._events.publish(DiscoveryComplete(devices=tuple(devices)))

    async def __aenter__(self) -> ControllerClient:
        """Async context manager entry - starts the command connection."""
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Async context manager exit - stops the command connection."""
        await self.disconnect()

    def __repr__(self) -> str:
        return f"ControllerClient(host={self._config.host!r}, state={self.state.name})"
