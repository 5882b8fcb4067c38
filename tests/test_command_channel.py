"""Tests for CommandChannel."""

import logging

import pytest
import pytest_asyncio

from vantageconnect.channels.command import CommandChannel
from vantageconnect.channels.state import ChannelState
from vantageconnect.models.events import BlindChanged, LoadChanged, ThermostatModeChanged
from vantageconnect.models.records import ThermostatMode


@pytest.fixture
def events():
    """Collected status events."""
    return []


@pytest.fixture
def channel(config, mock_transport, events):
    """Create a CommandChannel on a mock transport."""
    return CommandChannel(config, transport=mock_transport, on_event=events.append)


@pytest_asyncio.fixture
async def ready_channel(channel):
    """A started channel that has reached READY."""
    await channel.start()
    assert await channel.wait_ready(timeout=1.0)
    yield channel
    await channel.stop()


class TestLifecycle:
    """Tests for connect, subscribe and stop."""

    def test_initial_state(self, channel):
        assert channel.state == ChannelState.DISCONNECTED
        assert not channel.is_ready
        assert not channel.is_running
        assert channel.connection_count == 0

    @pytest.mark.asyncio
    async def test_connect_subscribes(self, ready_channel, mock_transport):
        assert ready_channel.state == ChannelState.READY
        assert ready_channel.connection_count == 1
        assert mock_transport.written_data == [b"STATUSON\r\n"]

    @pytest.mark.asyncio
    async def test_connect_with_credentials_logs_in_first(self, auth_config, mock_transport):
        channel = CommandChannel(auth_config, transport=mock_transport)
        await channel.start()
        try:
            assert await channel.wait_ready(timeout=1.0)
            assert mock_transport.written_data == [
                b"LOGIN admin secret\r\n",
                b"STATUSON\r\n",
            ]
        finally:
            await channel.stop()

    @pytest.mark.asyncio
    async def test_start_twice_is_noop(self, ready_channel, mock_transport):
        await ready_channel.start()
        assert mock_transport.open_count == 1

    @pytest.mark.asyncio
    async def test_stop(self, channel, mock_transport):
        await channel.start()
        assert await channel.wait_ready(timeout=1.0)
        await channel.stop()

        assert channel.state == ChannelState.DISCONNECTED
        assert not channel.is_running
        assert not mock_transport.is_open
        assert await channel.get_load_status("12") is False

    @pytest.mark.asyncio
    async def test_wait_ready_timeout(self, config, mock_transport):
        slow = config.model_copy(update={"reconnect_delay": 10.0})
        channel = CommandChannel(slow, transport=mock_transport)
        mock_transport.fail_next_open()
        await channel.start()
        try:
            assert await channel.wait_ready(timeout=0.05) is False
            assert channel.reconnect_pending
        finally:
            await channel.stop()
        assert not channel.reconnect_pending


class TestStatusEvents:
    """Tests for inbound status decoding."""

    @pytest.mark.asyncio
    async def test_events_in_arrival_order(self, ready_channel, mock_transport, events, wait_until):
        mock_transport.add_response(b"S:LOAD 12 100.000\r\nR:GETB")
        mock_transport.add_response(b"LIND 30 45\r\nS:THERMOP 7 HEAT\r\n")

        await wait_until(lambda: len(events) == 3)
        assert events == [
            LoadChanged(vid="12", level=100),
            BlindChanged(vid="30", position=45),
            ThermostatModeChanged(vid="7", mode=ThermostatMode.HEAT),
        ]

    @pytest.mark.asyncio
    async def test_malformed_and_unknown_lines_skipped(self, ready_channel, mock_transport, events, wait_until):
        mock_transport.add_response(b"S:LOAD 12 bright\r\nS:TEMP 7 21\r\nS:LOAD 13 40\r\n")

        await wait_until(lambda: len(events) == 1)
        assert events == [LoadChanged(vid="13", level=40)]
        assert ready_channel.is_ready

    @pytest.mark.asyncio
    async def test_query_reply(self, ready_channel, mock_transport, events, wait_until):
        mock_transport.set_response_callback(
            lambda data: b"R:GETLOAD 12 75\r\n" if data == b"GETLOAD 12\r\n" else None
        )
        assert await ready_channel.get_load_status("12") is True

        await wait_until(lambda: len(events) == 1)
        assert events == [LoadChanged(vid="12", level=75)]

    @pytest.mark.asyncio
    async def test_failing_callback_does_not_stop_channel(self, config, mock_transport, wait_until):
        received = []

        def on_event(event):
            received.append(event)
            if len(received) == 1:
                raise RuntimeError("subscriber bug")

        channel = CommandChannel(config, transport=mock_transport, on_event=on_event)
        await channel.start()
        try:
            mock_transport.add_response(b"S:LOAD 1 10\r\nS:LOAD 2 20\r\n")
            await wait_until(lambda: len(received) == 2)
            assert channel.is_ready
        finally:
            await channel.stop()


class TestReconnect:
    """Tests for reconnection after the connection drops."""

    @pytest.mark.asyncio
    async def test_reconnect_after_close(self, ready_channel, mock_transport, wait_until):
        mock_transport.feed_eof()

        await wait_until(lambda: mock_transport.open_count == 2 and ready_channel.is_ready)
        assert ready_channel.connection_count == 2
        assert mock_transport.written_data == [b"STATUSON\r\n", b"STATUSON\r\n"]

        assert await ready_channel.set_load_level("12", 50) is True
        mock_transport.assert_written(b"INVOKE 12 Load.Ramp 6 1 50\r\n")

    @pytest.mark.asyncio
    async def test_writes_dropped_while_disconnected(self, config, mock_transport, wait_until):
        slow = config.model_copy(update={"reconnect_delay": 0.2})
        channel = CommandChannel(slow, transport=mock_transport)
        await channel.start()
        try:
            assert await channel.wait_ready(timeout=1.0)
            mock_transport.feed_eof()
            await wait_until(lambda: channel.reconnect_pending)

            assert channel.state == ChannelState.DISCONNECTED
            assert await channel.get_blind_position("30") is False
            mock_transport.assert_write_count(1)

            assert await channel.wait_ready(timeout=1.0)
            assert await channel.get_blind_position("30") is True
            mock_transport.assert_written(b"GETBLIND 30\r\n")
        finally:
            await channel.stop()

    @pytest.mark.asyncio
    async def test_reconnect_after_failed_open(self, config, mock_transport):
        mock_transport.fail_next_open()
        channel = CommandChannel(config, transport=mock_transport)
        await channel.start()
        try:
            assert await channel.wait_ready(timeout=1.0)
            assert channel.connection_count == 1
        finally:
            await channel.stop()

    @pytest.mark.asyncio
    async def test_failed_write_triggers_reconnect(self, ready_channel, mock_transport, wait_until):
        mock_transport.fail_next_write()
        assert await ready_channel.get_load_status("12") is False

        await wait_until(lambda: mock_transport.open_count == 2 and ready_channel.is_ready)
        assert await ready_channel.get_load_status("12") is True

    @pytest.mark.asyncio
    async def test_partial_line_discarded_on_reconnect(self, ready_channel, mock_transport, events, wait_until):
        mock_transport.add_response(b"S:LOAD 12 5")
        mock_transport.feed_eof()
        mock_transport.add_response(b"S:LOAD 13 60\r\n")

        await wait_until(lambda: len(events) == 1)
        assert events == [LoadChanged(vid="13", level=60)]


class TestCommands:
    """Tests for outbound command methods."""

    @pytest.mark.asyncio
    async def test_load_and_blind_commands(self, ready_channel, mock_transport):
        assert await ready_channel.set_load_level("12", 75, ramp_seconds=3)
        assert await ready_channel.set_blind_position("30", 45)
        assert await ready_channel.get_blind_position("30")
        assert mock_transport.written_data[1:] == [
            b"INVOKE 12 Load.Ramp 6 3 75\r\n",
            b"BLIND 30 POS 45\r\n",
            b"GETBLIND 30\r\n",
        ]

    @pytest.mark.asyncio
    async def test_get_thermostat_state(self, ready_channel, mock_transport):
        assert await ready_channel.get_thermostat_state("7") is True
        assert mock_transport.written_data[1:] == [
            b"INVOKE 7 Thermostat.GetIndoorTemperature\r\n",
            b"GETTHERMOP 7\r\n",
            b"GETTHERMTEMP 7 HEAT\r\n",
            b"GETTHERMTEMP 7 COOL\r\n",
        ]

    @pytest.mark.asyncio
    async def test_set_thermostat_mode(self, ready_channel, mock_transport):
        assert await ready_channel.set_thermostat_mode("7", ThermostatMode.COOL)
        assert await ready_channel.set_thermostat_mode("7", 17)
        assert mock_transport.written_data[1:] == [b"THERMOP 7 COOL\r\n", b"THERMOP 7 OFF\r\n"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "mode,value,expected",
        [
            (ThermostatMode.HEAT, 68, b"THERMTEMP 7 HEAT 68\r\n"),
            (ThermostatMode.COOL, 76.5, b"THERMTEMP 7 COOL 76.5\r\n"),
            (ThermostatMode.AUTO, 80, b"THERMTEMP 7 COOL 80\r\n"),
            (ThermostatMode.AUTO, 60, b"THERMTEMP 7 HEAT 60\r\n"),
        ],
    )
    async def test_set_thermostat_temperature(self, ready_channel, mock_transport, mode, value, expected):
        assert await ready_channel.set_thermostat_temperature("7", value, mode, 65, 75) is True
        mock_transport.assert_written(expected)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "mode,value",
        [
            (ThermostatMode.AUTO, 72),
            (ThermostatMode.AUTO, 65),
            (ThermostatMode.AUTO, 75),
            (ThermostatMode.OFF, 72),
        ],
    )
    async def test_setpoint_dead_band(self, ready_channel, mock_transport, mode, value):
        assert await ready_channel.set_thermostat_temperature("7", value, mode, 65, 75) is False
        mock_transport.assert_write_count(1)

    @pytest.mark.asyncio
    async def test_commands_dropped_before_start(self, channel, mock_transport):
        assert await channel.get_load_status("12") is False
        assert await channel.get_thermostat_state("7") is False
        assert mock_transport.written_data == []


class TestWireLogging:
    """Tests for debug wire logging."""

    @pytest.mark.asyncio
    async def test_debug_logs_lines(self, auth_config, mock_transport, wait_until, caplog):
        debug_config = auth_config.model_copy(update={"debug": True})
        received = []
        channel = CommandChannel(debug_config, transport=mock_transport, on_event=received.append)

        with caplog.at_level(logging.DEBUG, logger="vantageconnect.channels.command"):
            await channel.start()
            try:
                assert await channel.wait_ready(timeout=1.0)
                mock_transport.add_response(b"S:LOAD 12 50\r\n")
                await wait_until(lambda: len(received) == 1)
            finally:
                await channel.stop()

        messages = [record.getMessage() for record in caplog.records]
        assert "TX STATUSON" in messages
        assert "RX S:LOAD 12 50" in messages
        assert "TX LOGIN admin ****" in messages
        assert not any("secret" in message for message in messages)

    @pytest.mark.asyncio
    async def test_no_wire_logging_without_debug(self, ready_channel, caplog):
        with caplog.at_level(logging.DEBUG, logger="vantageconnect.channels.command"):
            await ready_channel.set_blind_position("30", 10)
        assert not any(record.getMessage().startswith("TX") for record in caplog.records)
