"""
Mock transport for testing.

This module provides a mock transport implementation that allows testing
the channels and the client without a controller. Responses can be
pre-configured or dynamically generated using callback functions.

Example:
    >>> from vantageconnect.transport import MockTransport
    >>>
    >>> mock = MockTransport()
    >>> mock.add_response(b"S:LOAD 12 100.000\\r\\n")
    >>> mock.feed_eof()  # controller drops the connection
"""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Callable

from vantageconnect.exceptions import ConnectionError, TimeoutError, TransportError
from vantageconnect.protocol.constants import ProtocolConstants
from vantageconnect.transport.abc import AbstractTransport

# Queue marker for a peer-side close
_EOF = None


class MockTransport(AbstractTransport):
    """
    Mock transport for testing without a controller.

    Queued chunks are returned by read() in FIFO order, one chunk per read.
    A read with nothing queued waits until a chunk is added, EOF is fed or
    the transport is closed. EOF markers are queued in order with the data,
    so a test can script several connections up front:

        mock.add_response(b"S:LOAD 1 10\\r\\n")
        mock.feed_eof()                       # first connection ends
        mock.add_response(b"S:LOAD 1 20\\r\\n")  # seen after reconnect

    Attributes:
        written_data: List of all bytes written to the transport.
        open_count: Number of successful open() calls.
    """

    def __init__(self, endpoint: str = "mock://controller") -> None:
        """
        Initialize the mock transport.

        Args:
            endpoint: Identifier for the mock transport.
        """
        self._endpoint = endpoint
        self._is_open = False
        self._at_eof = False
        self._chunks: deque[bytes | None] = deque()
        self._written_data: list[bytes] = []
        self._open_errors: deque[BaseException] = deque()
        self._write_errors: deque[BaseException] = deque()
        self._data_ready: asyncio.Event | None = None
        self._response_callback: Callable[[bytes], bytes | None] | None = None
        self._open_count = 0

    @property
    def is_open(self) -> bool:
        """Check if the mock transport is open."""
        return self._is_open

    @property
    def endpoint(self) -> str:
        """Get the mock endpoint name."""
        return self._endpoint

    @property
    def open_count(self) -> int:
        """Get the number of successful opens."""
        return self._open_count

    @property
    def written_data(self) -> list[bytes]:
        """Get all data written to the transport."""
        return self._written_data.copy()

    @property
    def written_text(self) -> str:
        """Get all written data joined and decoded."""
        return b"".join(self._written_data).decode("utf-8")

    @property
    def last_written(self) -> bytes | None:
        """Get the most recently written data."""
        return self._written_data[-1] if self._written_data else None

    @property
    def pending_responses(self) -> int:
        """Number of queued chunks and EOF markers not yet read."""
        return len(self._chunks)

    def add_response(self, response: bytes) -> None:
        """
        Add a response chunk to the queue.

        Args:
            response: Bytes to return on a later read.
        """
        self._chunks.append(bytes(response))
        self._notify()

    def add_responses(self, *responses: bytes) -> None:
        """
        Add multiple response chunks to the queue.

        Args:
            *responses: Multiple byte chunks to add.
        """
        for response in responses:
            self.add_response(response)

    def feed_eof(self) -> None:
        """Queue a peer-side close after the chunks already queued."""
        self._chunks.append(_EOF)
        self._notify()

    def fail_next_open(self, error: BaseException | None = None) -> None:
        """
        Make the next open() raise.

        Args:
            error: Exception to raise. Defaults to a refused connection.
        """
        if error is None:
            error = ConnectionError(f"Failed to connect to {self._endpoint}")
            error.__cause__ = ConnectionRefusedError(111, "Connection refused")
        self._open_errors.append(error)

    def fail_next_write(self, error: BaseException | None = None) -> None:
        """Make the next write() raise."""
        self._write_errors.append(error or TransportError("Write failed: broken pipe"))

    def set_response_callback(
        self,
        callback: Callable[[bytes], bytes | None] | None,
    ) -> None:
        """
        Set a callback to dynamically generate responses.

        The callback receives the written data; returned bytes are queued
        as a response chunk. Returning None queues nothing.

        Args:
            callback: Function that takes written bytes and returns response.
        """
        self._response_callback = callback

    def clear(self) -> None:
        """Clear all written data and pending responses."""
        self._written_data.clear()
        self._chunks.clear()

    def clear_written(self) -> None:
        """Clear only the written data history."""
        self._written_data.clear()

    async def open(self) -> None:
        """
        Open the mock transport.

        Raises:
            TransportError: If already open, or as scheduled by
                fail_next_open().
        """
        if self._open_errors:
            raise self._open_errors.popleft()
        if self._is_open:
            raise TransportError("Mock transport already open")
        self._is_open = True
        self._at_eof = False
        self._open_count += 1

    async def close(self) -> None:
        """Close the mock transport, waking any pending read."""
        self._is_open = False
        self._notify()

    async def write(self, data: bytes) -> None:
        """
        Write data to the mock transport.

        Records the written data and optionally triggers response callback.

        Args:
            data: Bytes to write.

        Raises:
            TransportError: If transport is not open.
        """
        if not self._is_open:
            raise TransportError("Mock transport not open")
        if self._write_errors:
            raise self._write_errors.popleft()

        self._written_data.append(bytes(data))

        if self._response_callback:
            response = self._response_callback(bytes(data))
            if response is not None:
                self.add_response(response)

    async def read(
        self,
        max_bytes: int = ProtocolConstants.READ_CHUNK_SIZE,
        timeout: float | None = None,
    ) -> bytes:
        """
        Read the next queued chunk.

        Args:
            max_bytes: Maximum chunk size; longer chunks are split.
            timeout: Seconds to wait for a chunk. None waits indefinitely.

        Returns:
            Up to max_bytes bytes, or b"" once an EOF marker is reached.

        Raises:
            TimeoutError: If nothing arrives within timeout.
            TransportError: If the transport is or becomes closed.
        """
        while True:
            if not self._is_open:
                raise TransportError("Mock transport not open")
            if self._at_eof:
                return b""

            if self._chunks:
                chunk = self._chunks.popleft()
                if chunk is _EOF:
                    self._at_eof = True
                    return b""
                if len(chunk) > max_bytes:
                    self._chunks.appendleft(chunk[max_bytes:])
                    chunk = chunk[:max_bytes]
                return chunk

            event = self._event()
            event.clear()
            try:
                await asyncio.wait_for(event.wait(), timeout=timeout)
            except asyncio.TimeoutError:
                raise TimeoutError(
                    "No mock response available",
                    timeout_seconds=timeout,
                ) from None

    def assert_written(self, expected: bytes, index: int = -1) -> None:
        """
        Assert that specific data was written.

        Args:
            expected: Expected bytes.
            index: Index in written_data list (-1 for last).

        Raises:
            AssertionError: If data doesn't match.
        """
        if not self._written_data:
            raise AssertionError("No data written to mock transport")

        actual = self._written_data[index]
        if actual != expected:
            raise AssertionError(f"Written data mismatch: expected {expected!r}, got {actual!r}")

    def assert_write_count(self, expected: int) -> None:
        """
        Assert number of write operations.

        Args:
            expected: Expected number of writes.

        Raises:
            AssertionError: If count doesn't match.
        """
        actual = len(self._written_data)
        if actual != expected:
            raise AssertionError(f"Write count mismatch: expected {expected}, got {actual}")

    def _event(self) -> asyncio.Event:
        if self._data_ready is None:
            self._data_ready = asyncio.Event()
        return self._data_ready

    def _notify(self) -> None:
        if self._data_ready is not None:
            self._data_ready.set()

    def __repr__(self) -> str:
        status = "open" if self._is_open else "closed"
        return f"MockTransport({self._endpoint!r}, {status}, pending={len(self._chunks)})"
