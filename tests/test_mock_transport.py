"""Tests for MockTransport."""

import asyncio

import pytest

from vantageconnect.exceptions import ConnectionError, TimeoutError, TransportError
from vantageconnect.transport.mock import MockTransport


class TestMockTransport:
    """Tests for MockTransport class."""

    @pytest.fixture
    def transport(self):
        """Create a MockTransport instance."""
        return MockTransport()

    @pytest.mark.asyncio
    async def test_open_close(self, transport):
        """Test opening and closing transport."""
        assert not transport.is_open
        await transport.open()
        assert transport.is_open
        assert transport.open_count == 1
        await transport.close()
        assert not transport.is_open

    @pytest.mark.asyncio
    async def test_double_open_raises(self, transport):
        """Test that opening twice raises error."""
        await transport.open()
        with pytest.raises(TransportError):
            await transport.open()

    @pytest.mark.asyncio
    async def test_reopen_after_close(self, transport):
        await transport.open()
        await transport.close()
        await transport.open()
        assert transport.open_count == 2

    @pytest.mark.asyncio
    async def test_fail_next_open(self, transport):
        transport.fail_next_open()
        with pytest.raises(ConnectionError) as exc_info:
            await transport.open()
        assert isinstance(exc_info.value.__cause__, ConnectionRefusedError)
        assert not transport.is_open

        await transport.open()
        assert transport.is_open

    @pytest.mark.asyncio
    async def test_write_records_data(self, transport):
        """Test that write records data."""
        await transport.open()
        await transport.write(b"hello")
        await transport.write(b"world")
        assert transport.written_data == [b"hello", b"world"]
        assert transport.last_written == b"world"
        assert transport.written_text == "helloworld"

    @pytest.mark.asyncio
    async def test_write_when_closed_raises(self, transport):
        """Test that writing to closed transport raises."""
        with pytest.raises(TransportError):
            await transport.write(b"test")

    @pytest.mark.asyncio
    async def test_fail_next_write(self, transport):
        await transport.open()
        transport.fail_next_write()
        with pytest.raises(TransportError):
            await transport.write(b"lost")
        await transport.write(b"kept")
        assert transport.written_data == [b"kept"]

    @pytest.mark.asyncio
    async def test_read_chunks_in_order(self, transport):
        await transport.open()
        transport.add_responses(b"first", b"second")
        assert await transport.read() == b"first"
        assert await transport.read() == b"second"

    @pytest.mark.asyncio
    async def test_read_splits_long_chunk(self, transport):
        await transport.open()
        transport.add_response(b"abcdef")
        assert await transport.read(4) == b"abcd"
        assert await transport.read(4) == b"ef"

    @pytest.mark.asyncio
    async def test_read_timeout(self, transport):
        """Test that reading with no data raises timeout."""
        await transport.open()
        with pytest.raises(TimeoutError):
            await transport.read(timeout=0.01)

    @pytest.mark.asyncio
    async def test_read_waits_for_response(self, transport):
        await transport.open()
        reader = asyncio.create_task(transport.read())
        await asyncio.sleep(0)
        assert not reader.done()
        transport.add_response(b"late")
        assert await asyncio.wait_for(reader, 1.0) == b"late"

    @pytest.mark.asyncio
    async def test_eof(self, transport):
        await transport.open()
        transport.add_response(b"data")
        transport.feed_eof()
        transport.add_response(b"next connection")

        assert await transport.read() == b"data"
        assert await transport.read() == b""
        assert await transport.read() == b""

        await transport.close()
        await transport.open()
        assert await transport.read() == b"next connection"

    @pytest.mark.asyncio
    async def test_close_wakes_pending_read(self, transport):
        await transport.open()
        reader = asyncio.create_task(transport.read())
        await asyncio.sleep(0)
        await transport.close()
        with pytest.raises(TransportError):
            await asyncio.wait_for(reader, 1.0)

    @pytest.mark.asyncio
    async def test_response_callback(self, transport):
        """Test dynamic response generation."""
        await transport.open()
        transport.set_response_callback(
            lambda data: b"R:GETLOAD 12 75\r\n" if data.startswith(b"GETLOAD") else None
        )
        await transport.write(b"GETLOAD 12\r\n")
        await transport.write(b"STATUSON\r\n")
        assert transport.pending_responses == 1
        assert await transport.read() == b"R:GETLOAD 12 75\r\n"

    @pytest.mark.asyncio
    async def test_assert_written(self, transport):
        """Test assert_written helper."""
        await transport.open()
        await transport.write(b"test")
        transport.assert_written(b"test")
        with pytest.raises(AssertionError):
            transport.assert_written(b"wrong")

    @pytest.mark.asyncio
    async def test_assert_write_count(self, transport):
        """Test assert_write_count helper."""
        await transport.open()
        await transport.write(b"a")
        await transport.write(b"b")
        transport.assert_write_count(2)
        with pytest.raises(AssertionError):
            transport.assert_write_count(3)

    @pytest.mark.asyncio
    async def test_clear(self, transport):
        """Test clearing transport state."""
        await transport.open()
        await transport.write(b"data")
        transport.add_response(b"response")
        transport.clear()
        assert transport.written_data == []
        assert transport.pending_responses == 0

    @pytest.mark.asyncio
    async def test_context_manager(self, transport):
        async with transport:
            assert transport.is_open
        assert not transport.is_open
