"""
Async TCP transport using asyncio streams.

This module provides the transport implementation for communicating with
InFusion controllers over the local network. Both controller protocols run
over plain TCP: the command protocol on port 3001 and the configuration
protocol on port 2001.

Example:
    >>> transport = AsyncTcpTransport("192.168.1.100", 3001)
    >>> async with transport:
    ...     await transport.write(b"GETLOAD 12\\r\\n")
    ...     chunk = await transport.read(timeout=5.0)
"""

from __future__ import annotations

import asyncio

from vantageconnect.exceptions import ConnectionError, TimeoutError, TransportError
from vantageconnect.protocol.constants import ProtocolConstants
from vantageconnect.transport.abc import AbstractTransport


class AsyncTcpTransport(AbstractTransport):
    """
    Async TCP transport.

    Attributes:
        host: Controller address.
        port: Controller TCP port.
        is_open: Whether the connection is currently open.
    """

    def __init__(
        self,
        host: str,
        port: int,
        connect_timeout: float | None = None,
    ) -> None:
        """
        Initialize the TCP transport.

        Args:
            host: Controller IP address or host name.
            port: TCP port.
            connect_timeout: Optional ceiling for open(); callers may also
                bound open() themselves.
        """
        self._host = host
        self._port = port
        self._connect_timeout = connect_timeout
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None

    @property
    def is_open(self) -> bool:
        """Check if the connection is currently open."""
        return (
            self._writer is not None
            and not self._writer.is_closing()
            and self._reader is not None
        )

    @property
    def endpoint(self) -> str:
        """Get the host:port endpoint."""
        return f"{self._host}:{self._port}"

    @property
    def host(self) -> str:
        """Get the controller address."""
        return self._host

    @property
    def port(self) -> int:
        """Get the TCP port."""
        return self._port

    async def open(self) -> None:
        """
        Open the TCP connection.

        Raises:
            TimeoutError: If connect_timeout expires.
            ConnectionError: If the connection cannot be established.
        """
        if self.is_open:
            return

        try:
            self._reader, self._writer = await asyncio.wait_for(
                asyncio.open_connection(self._host, self._port),
                timeout=self._connect_timeout,
            )
        except asyncio.TimeoutError:
            raise TimeoutError(
                f"Timeout connecting to {self.endpoint}",
                timeout_seconds=self._connect_timeout,
            ) from None
        except OSError as e:
            raise ConnectionError(f"Failed to connect to {self.endpoint}: {e}") from e

    async def close(self) -> None:
        """
        Close the connection.

        Safely closes the connection and releases resources. Safe to call
        multiple times.
        """
        writer = self._writer
        self._reader = None
        self._writer = None

        if writer is not None:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError:
                # Peer already gone
                pass

    async def write(self, data: bytes) -> None:
        """
        Write data to the connection.

        Args:
            data: Bytes to transmit.

        Raises:
            TransportError: If the connection is not open or write fails.
        """
        if not self.is_open:
            raise TransportError(f"Connection to {self.endpoint} is not open")

        try:
            self._writer.write(data)
            await self._writer.drain()
        except OSError as e:
            raise TransportError(f"Write failed: {e}") from e

    async def read(
        self,
        max_bytes: int = ProtocolConstants.READ_CHUNK_SIZE,
        timeout: float | None = None,
    ) -> bytes:
        """
        Read the next available chunk.

        Args:
            max_bytes: Maximum chunk size.
            timeout: Read timeout in seconds. None waits indefinitely.

        Returns:
            Received bytes, or b"" once the controller closed the connection.

        Raises:
            TimeoutError: If timeout expires before data arrives.
            TransportError: If the connection is not open or read fails.
        """
        if self._reader is None:
            raise TransportError(f"Connection to {self.endpoint} is not open")

        try:
            return await asyncio.wait_for(self._reader.read(max_bytes), timeout=timeout)
        except asyncio.TimeoutError:
            raise TimeoutError(
                f"Timeout waiting for data from {self.endpoint}",
                timeout_seconds=timeout,
            ) from None
        except OSError as e:
            raise TransportError(f"Read failed: {e}") from e

    def __repr__(self) -> str:
        status = "open" if self.is_open else "closed"
        return f"AsyncTcpTransport({self.endpoint!r}, {status})"
