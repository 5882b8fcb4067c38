"""
Abstract transport interface for InFusion protocol communication.

This module defines the abstract base class for all transport
implementations. Transports handle the low-level byte stream to the
controller; framing (lines, XML envelopes) belongs to the channels.

The transport layer is responsible for:
- Opening/closing the connection
- Reading and writing raw bytes
- Timeout handling

Implementations:
- AsyncTcpTransport: asyncio TCP stream
- MockTransport: For testing without a controller
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from vantageconnect.protocol.constants import ProtocolConstants

if TYPE_CHECKING:
    from types import TracebackType


class AbstractTransport(ABC):
    """
    Abstract base class for controller transports.

    A transport may be opened again after it has been closed, which is how
    the command channel reconnects.

        async with AsyncTcpTransport("192.168.1.100", 3001) as transport:
            await transport.write(b"STATUSON\\r\\n")
            chunk = await transport.read()

    Attributes:
        is_open: Whether the transport connection is currently open.
        endpoint: Identifier for the transport (e.g. "192.168.1.100:3001").
    """

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """
        Check if the transport connection is currently open.

        Returns:
            True if connected and ready for I/O, False otherwise.
        """
        ...

    @property
    @abstractmethod
    def endpoint(self) -> str:
        """
        Get the transport identifier.

        Returns:
            Endpoint string (e.g. "192.168.1.100:3001").
        """
        ...

    @abstractmethod
    async def open(self) -> None:
        """
        Open the transport connection.

        Raises:
            ConnectionError: If the connection cannot be established. The
                underlying OSError is chained as ``__cause__``.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """
        Close the transport connection.

        Safe to call multiple times (idempotent). After closing, the
        transport can be reopened with open().
        """
        ...

    @abstractmethod
    async def write(self, data: bytes) -> None:
        """
        Write data to the transport.

        Args:
            data: Bytes to send.

        Raises:
            TransportError: If the transport is not open or write fails.
        """
        ...

    @abstractmethod
    async def read(
        self,
        max_bytes: int = ProtocolConstants.READ_CHUNK_SIZE,
        timeout: float | None = None,
    ) -> bytes:
        """
        Read the next available chunk.

        Returns as soon as any data is available; the chunk has no relation
        to protocol line or message boundaries.

        Args:
            max_bytes: Maximum chunk size.
            timeout: Read timeout in seconds. None waits indefinitely.

        Returns:
            Up to max_bytes bytes, or b"" once the peer has closed.

        Raises:
            TimeoutError: If timeout expires before any data arrives.
            TransportError: If the transport is not open or read fails.
        """
        ...

    async def __aenter__(self) -> AbstractTransport:
        """Async context manager entry - opens the transport."""
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Async context manager exit - closes the transport."""
        await self.close()
