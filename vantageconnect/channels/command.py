"""
Command channel.

The long-lived control connection (port 3001). A single background task
owns the whole connection lifecycle:

    DISCONNECTED -> CONNECTING -> CONNECTED -> (AUTHENTICATING) -> READY
         ^                                                          |
         +------ close / I/O error, then fixed reconnect delay -----+

On connect the channel sends LOGIN (when credentials are configured) and
STATUSON, then treats the connection as READY without waiting for any
acknowledgment. Incoming bytes run through the LineCodec and the status
dispatcher; decoded events are handed to ``on_event`` in arrival order.

Outbound commands are fire-and-forget. Every write method returns True
when the line was written and False when it was dropped because the
channel is not READY or the write failed.

Example:
    >>> channel = CommandChannel(config, on_event=print)
    >>> await channel.start()
    >>> await channel.wait_ready(timeout=5.0)
    >>> await channel.set_load_level("12", 75)
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Callable

from vantageconnect.channels.state import ChannelState
from vantageconnect.exceptions import VantageConnectError
from vantageconnect.models.records import ThermostatMode
from vantageconnect.parsers.status_parser import decode_status_line
from vantageconnect.protocol.constants import ProtocolConstants, Verb
from vantageconnect.protocol.encoding import (
    encode_blind_position,
    encode_get_blind,
    encode_get_indoor_temperature,
    encode_get_load,
    encode_get_thermostat_mode,
    encode_get_thermostat_setpoint,
    encode_load_ramp,
    encode_login,
    encode_status_on,
    encode_thermostat_mode,
    encode_thermostat_setpoint,
)
from vantageconnect.protocol.line_codec import LineCodec
from vantageconnect.transport.tcp_async import AsyncTcpTransport

if TYPE_CHECKING:
    from vantageconnect.config import ControllerConfig
    from vantageconnect.models.events import StatusEvent
    from vantageconnect.transport.abc import AbstractTransport

logger = logging.getLogger(__name__)

StatusCallback = Callable[["StatusEvent"], None]


class CommandChannel:
    """
    Persistent, self-reconnecting command connection.

    Attributes:
        state: Current connection state.
        is_ready: Whether outbound writes are currently accepted.
        reconnect_pending: Whether the channel is waiting to reconnect.
        connection_count: Number of connections established so far.
    """

    def __init__(
        self,
        config: ControllerConfig,
        transport: AbstractTransport | None = None,
        on_event: StatusCallback | None = None,
    ) -> None:
        """
        Initialize the command channel.

        Args:
            config: Controller configuration.
            transport: Transport to use; defaults to TCP on the command port.
            on_event: Called with every decoded status event.
        """
        self._config = config
        self._transport = transport or AsyncTcpTransport(config.host, config.command_port)
        self._on_event = on_event
        self._codec = LineCodec()
        self._state = ChannelState.DISCONNECTED
        self._task: asyncio.Task[None] | None = None
        self._stopping = False
        self._reconnect_pending = False
        self._connection_count = 0
        self._ready: asyncio.Event | None = None

    @property
    def state(self) -> ChannelState:
        """Get the current connection state."""
        return self._state

    @property
    def is_ready(self) -> bool:
        """Check if outbound writes are accepted."""
        return self._state is ChannelState.READY

    @property
    def is_running(self) -> bool:
        """Check if the connection task is running."""
        return self._task is not None and not self._task.done()

    @property
    def reconnect_pending(self) -> bool:
        """Check if a reconnect is scheduled."""
        return self._reconnect_pending

    @property
    def connection_count(self) -> int:
        """Get the number of connections established."""
        return self._connection_count

    @property
    def transport(self) -> AbstractTransport:
        """Get the underlying transport."""
        return self._transport

    async def start(self) -> None:
        """
        Start the connection task.

        Returns immediately; connection progress is reported through
        state and wait_ready(). Calling start() on a running channel does
        nothing.
        """
        if self.is_running:
            return
        self._stopping = False
        self._task = asyncio.create_task(
            self._run(),
            name=f"vantageconnect-command-{self._transport.endpoint}",
        )

    async def stop(self) -> None:
        """Stop the connection task and close the connection."""
        self._stopping = True
        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        await self._transport.close()
        self._reconnect_pending = False
        self._set_state(ChannelState.DISCONNECTED)
        logger.info("Command channel to %s stopped", self._transport.endpoint)

    async def wait_ready(self, timeout: float | None = None) -> bool:
        """
        Wait until the channel is READY.

        Args:
            timeout: Seconds to wait. None waits indefinitely.

        Returns:
            True if READY, False if the timeout expired first.
        """
        if self.is_ready:
            return True
        try:
            await asyncio.wait_for(self._ready_event().wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return self.is_ready

    async def write(self, data: bytes) -> bool:
        """
        Write one encoded command line.

        Args:
            data: CRLF-terminated command.

        Returns:
            True if written; False if dropped because the channel is not
            READY or the write failed. A failed write closes the
            connection, which triggers a reconnect.
        """
        if self._state is not ChannelState.READY:
            logger.debug(
                "Dropping command while %s: %s",
                self._state.name,
                self._wire_text(data),
            )
            return False

        try:
            await self._send(data)
        except VantageConnectError as e:
            logger.error("Write to %s failed: %s", self._transport.endpoint, e)
            await self._transport.close()
            return False
        return True

    # Outbound commands

    async def get_load_status(self, vid: str) -> bool:
        """Request a load's level (GETLOAD)."""
        return await self.write(encode_get_load(vid))

    async def set_load_level(
        self,
        vid: str,
        level: float,
        ramp_seconds: float = ProtocolConstants.DEFAULT_RAMP_SECONDS,
    ) -> bool:
        """Ramp a load to a level over ramp_seconds."""
        return await self.write(encode_load_ramp(vid, level, ramp_seconds))

    async def set_blind_position(self, vid: str, position: float) -> bool:
        """Move a blind to a position."""
        return await self.write(encode_blind_position(vid, position))

    async def get_blind_position(self, vid: str) -> bool:
        """Request a blind's position (GETBLIND)."""
        return await self.write(encode_get_blind(vid))

    async def get_thermostat_state(self, vid: str) -> bool:
        """
        Request a thermostat's full state.

        Sends four commands: indoor temperature, mode, heat setpoint and
        cool setpoint.

        Returns:
            True only if all four were written.
        """
        commands = (
            encode_get_indoor_temperature(vid),
            encode_get_thermostat_mode(vid),
            encode_get_thermostat_setpoint(vid, ThermostatMode.HEAT),
            encode_get_thermostat_setpoint(vid, ThermostatMode.COOL),
        )
        written = True
        for command in commands:
            written = await self.write(command) and written
        return written

    async def set_thermostat_mode(self, vid: str, mode: ThermostatMode | int) -> bool:
        """Set a thermostat's mode; unknown modes are sent as OFF."""
        return await self.write(encode_thermostat_mode(vid, mode))

    async def set_thermostat_temperature(
        self,
        vid: str,
        value: float,
        mode: ThermostatMode | int,
        heating_threshold: float,
        cooling_threshold: float,
    ) -> bool:
        """
        Set a thermostat setpoint for the given mode.

        HEAT and COOL update their own setpoint. In AUTO a cool setpoint
        is written only when value is above cooling_threshold and a heat
        setpoint only when value is below heating_threshold; values
        between the two thresholds write nothing. OFF writes nothing.

        Returns:
            True if a command was written.
        """
        target = _setpoint_target(value, mode, heating_threshold, cooling_threshold)
        if target is None:
            logger.debug(
                "No setpoint write for %s: %s in mode %s between %s and %s",
                vid,
                value,
                mode,
                heating_threshold,
                cooling_threshold,
            )
            return False
        return await self.write(encode_thermostat_setpoint(vid, target, value))

    # Connection lifecycle

    async def _run(self) -> None:
        endpoint = self._transport.endpoint
        while not self._stopping:
            try:
                await self._connect()
                await self._read_loop()
            except VantageConnectError as e:
                logger.error("Command connection to %s failed: %s", endpoint, e)
                logger.debug("Connection failure details", exc_info=True)

            await self._disconnect()
            if self._stopping:
                break

            delay = self._config.reconnect_delay
            logger.warning(
                "Disconnected from %s, reconnecting in %.1f seconds",
                endpoint,
                delay,
            )
            self._reconnect_pending = True
            try:
                await asyncio.sleep(delay)
            finally:
                self._reconnect_pending = False

    async def _connect(self) -> None:
        endpoint = self._transport.endpoint
        self._set_state(ChannelState.CONNECTING)
        logger.info("Attempting to connect to controller at %s", endpoint)

        await self._transport.open()
        self._connection_count += 1
        self._set_state(ChannelState.CONNECTED)
        logger.info("Connected to controller at %s", endpoint)

        if self._config.has_credentials:
            self._set_state(ChannelState.AUTHENTICATING)
            logger.debug("Authenticating as %s", self._config.username)
            await self._send(encode_login(self._config.username, self._config.password))

        await self._send(encode_status_on())
        self._set_state(ChannelState.READY)

    async def _read_loop(self) -> None:
        while True:
            chunk = await self._transport.read()
            if not chunk:
                logger.warning("Connection closed by controller at %s", self._transport.endpoint)
                return

            for line in self._codec.feed(chunk):
                if self._config.debug:
                    logger.debug("RX %s", line)
                event = decode_status_line(line)
                if event is not None:
                    self._emit(event)

    async def _disconnect(self) -> None:
        self._set_state(ChannelState.DISCONNECTED)
        self._codec.reset()
        await self._transport.close()

    async def _send(self, data: bytes) -> None:
        if self._config.debug:
            logger.debug("TX %s", self._wire_text(data))
        await self._transport.write(data)

    def _emit(self, event: StatusEvent) -> None:
        if self._on_event is None:
            return
        try:
            self._on_event(event)
        except Exception as e:  # noqa: BLE001
            logger.error("Status callback failed for %s: %s", event, e)
            logger.debug("Status callback failure details", exc_info=True)

    def _set_state(self, state: ChannelState) -> None:
        if state is self._state:
            return
        logger.debug("Command channel %s -> %s", self._state.name, state.name)
        self._state = state
        ready = self._ready_event()
        if state is ChannelState.READY:
            ready.set()
        else:
            ready.clear()

    def _ready_event(self) -> asyncio.Event:
        if self._ready is None:
            self._ready = asyncio.Event()
            if self._state is ChannelState.READY:
                self._ready.set()
        return self._ready

    @staticmethod
    def _wire_text(data: bytes) -> str:
        text = data.decode("utf-8", errors="replace").rstrip()
        tokens = text.split(" ")
        if tokens[0] == Verb.LOGIN.value and len(tokens) > 2:
            return f"{tokens[0]} {tokens[1]} ****"
        return text

    def __repr__(self) -> str:
        return f"CommandChannel({self._transport.endpoint!r}, {self._state.name})"


def _setpoint_target(
    value: float,
    mode: ThermostatMode | int,
    heating_threshold: float,
    cooling_threshold: float,
) -> ThermostatMode | None:
    """Pick the setpoint a temperature change writes to, if any."""
    if mode == ThermostatMode.HEAT:
        return ThermostatMode.HEAT
    if mode == ThermostatMode.COOL:
        return ThermostatMode.COOL
    if mode == ThermostatMode.AUTO:
        if value > cooling_threshold:
            return ThermostatMode.COOL
        if value < heating_threshold:
            return ThermostatMode.HEAT
    return None
