"""
Outbound command encoding for the host command protocol.

Every command is a single line of space-separated tokens terminated by
CRLF. Numbers are written the way the controller prints them: integral
values without a decimal part.

For example:
- set_load_level("12", 75.0) is transmitted as "INVOKE 12 Load.Ramp 6 1 75"
- set_thermostat_temperature("7", 68.5, HEAT) as "THERMTEMP 7 HEAT 68.5"
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from vantageconnect.protocol.constants import ProtocolConstants, Verb

if TYPE_CHECKING:
    from vantageconnect.models.records import ThermostatMode

# Keyed by ThermostatMode value
_MODE_TOKENS: Final[dict[int, str]] = {
    0: "OFF",
    1: "HEAT",
    2: "COOL",
    3: "AUTO",
}


def format_number(value: float | int | str) -> str:
    """
    Format a numeric argument for the wire.

    Example:
        >>> format_number(80.0)
        '80'
        >>> format_number(68.5)
        '68.5'
    """
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def mode_token(mode: ThermostatMode | int) -> str:
    """
    Get the wire token for a thermostat mode.

    Unrecognized values encode as OFF.
    """
    return _MODE_TOKENS.get(mode, "OFF")


def encode_command(verb: Verb | str, *args: object) -> bytes:
    """
    Build a complete command line.

    Args:
        verb: Command verb.
        *args: Arguments; numbers are formatted with format_number.

    Returns:
        ASCII command line including the CRLF terminator.
    """
    tokens = [verb.value if isinstance(verb, Verb) else verb]
    for arg in args:
        tokens.append(format_number(arg) if isinstance(arg, (int, float)) else str(arg))
    return " ".join(tokens).encode("utf-8") + ProtocolConstants.LINE_TERMINATOR


def encode_login(username: str, password: str) -> bytes:
    """Encode ``LOGIN <user> <pass>``."""
    return encode_command(Verb.LOGIN, username, password)


def encode_status_on() -> bytes:
    """Encode ``STATUSON``."""
    return encode_command(Verb.STATUSON)


def encode_get_load(vid: str) -> bytes:
    """Encode ``GETLOAD <vid>``."""
    return encode_command(Verb.GETLOAD, vid)


def encode_load_ramp(
    vid: str,
    level: float,
    ramp_seconds: float = ProtocolConstants.DEFAULT_RAMP_SECONDS,
) -> bytes:
    """
    Encode a timed ramp of a load to a level.

    Wire format: ``INVOKE <vid> Load.Ramp 6 <seconds> <level>``, where 6
    selects the "ramp to level over time" variant.
    """
    return encode_command(
        Verb.INVOKE,
        vid,
        ProtocolConstants.LOAD_RAMP_METHOD,
        ProtocolConstants.RAMP_SELECTOR,
        ramp_seconds,
        level,
    )


def encode_blind_position(vid: str, position: float) -> bytes:
    """Encode ``BLIND <vid> POS <position>``."""
    return encode_command(Verb.BLIND, vid, "POS", position)


def encode_get_blind(vid: str) -> bytes:
    """Encode ``GETBLIND <vid>``."""
    return encode_command(Verb.GETBLIND, vid)


def encode_get_indoor_temperature(vid: str) -> bytes:
    """Encode ``INVOKE <vid> Thermostat.GetIndoorTemperature``."""
    return encode_command(Verb.INVOKE, vid, ProtocolConstants.INDOOR_TEMPERATURE_METHOD)


def encode_get_thermostat_mode(vid: str) -> bytes:
    """Encode ``GETTHERMOP <vid>``."""
    return encode_command(Verb.GETTHERMOP, vid)


def encode_get_thermostat_setpoint(vid: str, mode: ThermostatMode) -> bytes:
    """Encode ``GETTHERMTEMP <vid> HEAT|COOL``."""
    return encode_command(Verb.GETTHERMTEMP, vid, mode_token(mode))


def encode_thermostat_mode(vid: str, mode: ThermostatMode | int) -> bytes:
    """Encode ``THERMOP <vid> OFF|HEAT|COOL|AUTO``."""
    return encode_command(Verb.THERMOP, vid, mode_token(mode))


def encode_thermostat_setpoint(vid: str, mode: ThermostatMode, value: float) -> bytes:
    """Encode ``THERMTEMP <vid> HEAT|COOL <value>``."""
    return encode_command(Verb.THERMTEMP, vid, mode_token(mode), value)
