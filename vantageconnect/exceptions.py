"""
Exception hierarchy for vantageconnect.

All exceptions inherit from VantageConnectError, providing a clean hierarchy
for error handling. The design follows these principles:

1. Transport errors (refused, unreachable, timeout) are distinct from
   protocol decode errors
2. Document parse errors carry context about what was being parsed
3. Configuration errors are the only errors raised before a connection
   is attempted
4. All exceptions provide meaningful error messages
"""

from __future__ import annotations


class VantageConnectError(Exception):
    """
    Base exception for all vantageconnect errors.

    All library-specific exceptions inherit from this class, allowing
    callers to catch all vantageconnect errors with a single except clause.
    """

    pass


class ProtocolError(VantageConnectError):
    """
    Protocol-level error.

    Raised when a discovery response envelope cannot be decoded, such as:
    - Malformed envelope XML
    - Backup payload that is not valid base64
    """

    pass


class TimeoutError(VantageConnectError):  # noqa: A001 - intentionally shadows builtin
    """
    Communication timeout.

    Raised when a connection or response is not received within the
    expected time.
    """

    def __init__(
        self,
        message: str = "Communication timeout",
        *,
        timeout_seconds: float | None = None,
    ) -> None:
        super().__init__(message)
        self.timeout_seconds = timeout_seconds

    def __str__(self) -> str:
        base = super().__str__()
        if self.timeout_seconds is not None:
            return f"{base} (after {self.timeout_seconds:.1f}s)"
        return base


class ParseError(VantageConnectError):
    """
    Backup document parsing error.

    Raised inside the backup parser when a strategy cannot make sense of
    the document. It never leaves the parser: the next strategy is tried.
    """

    def __init__(
        self,
        message: str,
        *,
        strategy: str | None = None,
        raw_data: str | None = None,
    ) -> None:
        super().__init__(message)
        self.strategy = strategy
        self.raw_data = raw_data

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.strategy:
            parts.append(f"strategy={self.strategy}")
        if self.raw_data:
            # Truncate raw data for display
            display_data = self.raw_data[:40] + "..." if len(self.raw_data) > 40 else self.raw_data
            parts.append(f"data={display_data}")
        return " ".join(parts) if len(parts) > 1 else parts[0]


class TransportError(VantageConnectError):
    """
    Transport-level error.

    Raised for low-level transport issues:
    - Socket connect failures
    - I/O errors
    - Reading or writing a closed transport
    """

    pass


class ConnectionError(TransportError):  # noqa: A001 - intentionally shadows builtin
    """
    Controller connection error.

    Raised when a connection to the controller cannot be established.
    The underlying socket error is chained as __cause__.
    """

    pass


class ConfigurationError(VantageConnectError):
    """
    Invalid controller configuration.

    Raised synchronously, before any connection is attempted, for a missing
    or invalid address, an inconsistent credential pair, or malformed omit
    and range strings.
    """

    pass


class DiscoveryInProgressError(VantageConnectError):
    """Raised when discovery is requested while a run is already active."""

    def __init__(self, message: str = "Discovery already in progress") -> None:
        super().__init__(message)
