"""
Transport layer for InFusion controller communication.

This package provides the byte-stream transports the command and
discovery channels run on.

Available transports:
- AsyncTcpTransport: asyncio TCP stream
- MockTransport: Mock transport for testing without a controller

Example:
    >>> from vantageconnect.transport import AsyncTcpTransport
    >>> async with AsyncTcpTransport("192.168.1.100", 3001) as transport:
    ...     await transport.write(b"STATUSON\\r\\n")
    ...     chunk = await transport.read()

Testing Example:
    >>> from vantageconnect.transport import MockTransport
    >>> mock = MockTransport()
    >>> mock.add_response(b"S:LOAD 12 100.000\\r\\n")
"""

from vantageconnect.transport.abc import AbstractTransport
from vantageconnect.transport.mock import MockTransport
from vantageconnect.transport.tcp_async import AsyncTcpTransport

__all__ = [
    "AbstractTransport",
    "AsyncTcpTransport",
    "MockTransport",
]
