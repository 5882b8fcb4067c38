"""
Discovery channel.

One discovery run owns one short-lived connection to the configuration
port (2001) and walks this sequence:

    connect (10 s ceiling)
      -> [ILogin request -> login response, success or not]
      -> IBackup GetFile request -> backup response
      -> decode base64 payload -> save diagnostic copy -> parse -> close

Every run ends exactly once with a device list. Transport failures end
the run with an empty list; a controller that closes the connection or
goes silent ends it with whatever was found so far. Nothing is raised to
the caller except DiscoveryInProgressError for overlapping runs.
"""

from __future__ import annotations

import asyncio
import codecs
import errno
import logging
from enum import Enum, auto
from typing import TYPE_CHECKING, Callable

from vantageconnect.channels.state import ChannelState
from vantageconnect.exceptions import (
    DiscoveryInProgressError,
    ProtocolError,
    TimeoutError,
    VantageConnectError,
)
from vantageconnect.parsers.backup_parser import BackupParser
from vantageconnect.protocol.envelopes import (
    BACKUP_REQUEST,
    BackupResponse,
    EnvelopeReader,
    LoginResponse,
    build_login_request,
)
from vantageconnect.transport.tcp_async import AsyncTcpTransport

if TYPE_CHECKING:
    from vantageconnect.config import ControllerConfig
    from vantageconnect.models.records import Device
    from vantageconnect.transport.abc import AbstractTransport

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[list["Device"]], None]


class FailureKind(Enum):
    """Diagnostic classification of a discovery transport failure."""

    REFUSED = auto()
    UNREACHABLE = auto()
    TIMEOUT = auto()
    OTHER = auto()


_UNREACHABLE_ERRNOS = frozenset({errno.EHOSTUNREACH, errno.ENETUNREACH})

_FAILURE_HINTS: dict[FailureKind, str] = {
    FailureKind.REFUSED: "Connection refused. Please check if port 2001 is open on the controller",
    FailureKind.UNREACHABLE: "Host unreachable. Please check your network connectivity",
    FailureKind.TIMEOUT: (
        "Connection timed out. Please check if ports 2001 and 3001 are open "
        "on the controller and your firewall settings"
    ),
}


def classify_failure(error: BaseException) -> FailureKind:
    """
    Classify a transport failure for diagnostics.

    Walks the exception and its ``__cause__`` chain looking for the
    underlying socket error.

    Example:
        >>> classify_failure(ConnectionRefusedError(111, "Connection refused"))
        <FailureKind.REFUSED: 1>
    """
    current: BaseException | None = error
    while current is not None:
        if isinstance(current, ConnectionRefusedError):
            return FailureKind.REFUSED
        if isinstance(current, (TimeoutError, asyncio.TimeoutError)):
            return FailureKind.TIMEOUT
        if isinstance(current, OSError):
            if current.errno in _UNREACHABLE_ERRNOS:
                return FailureKind.UNREACHABLE
            if current.errno == errno.ETIMEDOUT:
                return FailureKind.TIMEOUT
        current = current.__cause__
    return FailureKind.OTHER


class DiscoveryChannel:
    """
    One-shot backup retrieval over the configuration protocol.

    The channel may be run repeatedly, but only one run at a time.

    Example:
        >>> channel = DiscoveryChannel(config)
        >>> devices = await channel.run()
        >>> print(f"Found {len(devices)} devices")
    """

    def __init__(
        self,
        config: ControllerConfig,
        transport: AbstractTransport | None = None,
        parser: BackupParser | None = None,
        on_complete: CompletionCallback | None = None,
    ) -> None:
        """
        Initialize the discovery channel.

        Args:
            config: Controller configuration.
            transport: Transport to use; defaults to TCP on the discovery port.
            parser: Backup parser; defaults to the standard cascade.
            on_complete: Called once per run with the device list.
        """
        self._config = config
        self._transport = transport or AsyncTcpTransport(config.host, config.discovery_port)
        self._parser = parser or BackupParser()
        self._on_complete = on_complete
        self._state = ChannelState.DISCONNECTED
        self._running = False

    @property
    def state(self) -> ChannelState:
        """Get the current connection state."""
        return self._state

    @property
    def is_running(self) -> bool:
        """Check if a run is in progress."""
        return self._running

    @property
    def transport(self) -> AbstractTransport:
        """Get the underlying transport."""
        return self._transport

    async def run(self) -> list[Device]:
        """
        Run one discovery.

        Returns:
            Discovered devices, already filtered; empty on failure.

        Raises:
            DiscoveryInProgressError: If a run is already in progress.
        """
        if self._running:
            raise DiscoveryInProgressError()

        self._running = True
        devices: list[Device] = []
        try:
            devices = await self._discover()
        except VantageConnectError as e:
            logger.error("Discovery error: %s", e)
            hint = _FAILURE_HINTS.get(classify_failure(e))
            if hint:
                logger.info(hint)
            devices = []
        finally:
            await self._transport.close()
            self._set_state(ChannelState.DISCONNECTED)
            self._running = False

        self._complete(devices)
        return devices

    async def _discover(self) -> list[Device]:
        endpoint = self._transport.endpoint
        timeout = self._config.discovery_timeout

        self._set_state(ChannelState.CONNECTING)
        logger.info("Attempting to connect to controller at %s", endpoint)
        try:
            await asyncio.wait_for(self._transport.open(), timeout=timeout)
        except asyncio.TimeoutError:
            raise TimeoutError(
                f"Connection to {endpoint} timed out",
                timeout_seconds=timeout,
            ) from None
        self._set_state(ChannelState.CONNECTED)
        logger.info("Connected to controller for discovery")

        if self._config.has_credentials:
            self._set_state(ChannelState.AUTHENTICATING)
            logger.debug("Sending authentication credentials")
            await self._send(build_login_request(self._config.username, self._config.password))
        else:
            await self._request_backup()

        reader = EnvelopeReader()
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

        while True:
            try:
                chunk = await self._transport.read(timeout=self._config.response_timeout)
            except TimeoutError:
                logger.warning(
                    "No response from %s within %.0f seconds",
                    endpoint,
                    self._config.response_timeout,
                )
                return []
            if not chunk:
                logger.debug("Discovery connection closed by controller")
                return []

            reader.feed(decoder.decode(chunk))
            if not reader.has_envelope:
                continue

            try:
                response = reader.decode()
            except ProtocolError as e:
                logger.error("XML parsing error: %s", e)
                reader.clear()
                continue
            reader.clear()

            if isinstance(response, LoginResponse):
                if response.success:
                    logger.debug("Login successful")
                else:
                    logger.warning("Login failed, trying to get data anyway")
                await self._request_backup()
            elif isinstance(response, BackupResponse):
                return self._process_backup(response.document)
            else:
                logger.debug("Unrecognized response format")

    async def _request_backup(self) -> None:
        self._set_state(ChannelState.READY)
        logger.debug("Requesting backup file")
        await self._send(BACKUP_REQUEST)

    async def _send(self, data: bytes) -> None:
        if self._config.debug and not data.startswith(b"<ILogin>"):
            logger.debug("TX %s", data.decode("utf-8", errors="replace").rstrip())
        await self._transport.write(data)

    def _process_backup(self, document: str) -> list[Device]:
        logger.debug("Received backup file (%d characters)", len(document))
        self._save_backup(document)

        contents = self._parser.parse(document, self._config.device_filter())
        logger.info(
            "Discovered %d devices in %d areas (%s)",
            len(contents.devices),
            len(contents.areas),
            contents.strategy or "none",
        )
        return list(contents.devices)

    def _save_backup(self, document: str) -> None:
        path = self._config.backup_path
        try:
            path.write_text(document, encoding="utf-8")
        except OSError as e:
            logger.error("Failed to save backup file: %s", e)
            return
        logger.info("Saved backup file to %s", path)

    def _complete(self, devices: list[Device]) -> None:
        if self._on_complete is None:
            return
        try:
            self._on_complete(devices)
        except Exception as e:  # noqa: BLE001
            logger.error("Discovery callback failed: %s", e)
            logger.debug("Discovery callback failure details", exc_info=True)

    def _set_state(self, state: ChannelState) -> None:
        if state is not self._state:
            logger.debug("Discovery channel %s -> %s", self._state.name, state.name)
            self._state = state

    def __repr__(self) -> str:
        return f"DiscoveryChannel({self._transport.endpoint!r}, {self._state.name})"
