"""
Status line decoding for the command channel.

Maps tokenized protocol lines to typed status events using an explicit
verb table. Verbs are matched case-sensitively as exact tokens:

    S:LOAD / R:GETLOAD <vid> <level>              -> LoadChanged
    S:BLIND / R:GETBLIND <vid> <position>         -> BlindChanged
    R:INVOKE <vid> <value> <method>               -> ThermostatTemperatureChanged
                                                     (GetIndoorTemperature only)
    S:THERMOP / R:GETTHERMOP <vid> <mode>         -> ThermostatModeChanged
    R:THERMTEMP <vid> <mode> <setpoint>           -> ThermostatModeChanged + setpoint

Anything else is ignored. A line with missing or non-numeric arguments
decodes to None; it never raises.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Final

from vantageconnect.models.events import (
    BlindChanged,
    LoadChanged,
    StatusEvent,
    ThermostatModeChanged,
    ThermostatTemperatureChanged,
)
from vantageconnect.models.records import ThermostatMode
from vantageconnect.protocol.constants import (
    BLIND_STATUS_VERBS,
    LOAD_STATUS_VERBS,
    THERMOSTAT_MODE_VERBS,
    ProtocolConstants,
    Verb,
)
from vantageconnect.protocol.line_codec import ParsedLine

logger = logging.getLogger(__name__)

StatusHandler = Callable[[str, tuple[str, ...]], StatusEvent | None]


def parse_int(token: str) -> int:
    """
    Parse an integer argument.

    The controller reports levels as fixed-point text ("75.000"); the
    fractional part is truncated.

    Raises:
        ValueError: If the token is not a finite number.
    """
    try:
        return int(token)
    except ValueError:
        value = parse_float(token)
        return int(value)


def parse_float(token: str) -> float:
    """
    Parse a floating point argument.

    Raises:
        ValueError: If the token is not a finite number.
    """
    value = float(token)
    if not math.isfinite(value):
        raise ValueError(f"non-finite value: {token!r}")
    return value


def _decode_load(verb: str, args: tuple[str, ...]) -> StatusEvent:
    return LoadChanged(vid=args[0], level=parse_int(args[1]))


def _decode_blind(verb: str, args: tuple[str, ...]) -> StatusEvent:
    return BlindChanged(vid=args[0], position=parse_int(args[1]))


def _decode_invoke(verb: str, args: tuple[str, ...]) -> StatusEvent | None:
    if len(args) < 3 or ProtocolConstants.INDOOR_TEMPERATURE_METHOD not in args[2]:
        return None
    return ThermostatTemperatureChanged(vid=args[0], temperature=parse_float(args[1]))


def _decode_thermostat_mode(verb: str, args: tuple[str, ...]) -> StatusEvent:
    setpoint = parse_float(args[2]) if verb == Verb.R_THERMTEMP.value else None
    return ThermostatModeChanged(
        vid=args[0],
        mode=ThermostatMode.from_token(args[1]),
        setpoint=setpoint,
    )


def _build_dispatch_table() -> dict[str, StatusHandler]:
    table: dict[str, StatusHandler] = {}
    for verb in LOAD_STATUS_VERBS:
        table[verb] = _decode_load
    for verb in BLIND_STATUS_VERBS:
        table[verb] = _decode_blind
    for verb in THERMOSTAT_MODE_VERBS:
        table[verb] = _decode_thermostat_mode
    table[Verb.R_INVOKE.value] = _decode_invoke
    return table


STATUS_HANDLERS: Final[dict[str, StatusHandler]] = _build_dispatch_table()
"""Recognized inbound verbs and their decoders."""


def decode_status_line(line: ParsedLine) -> StatusEvent | None:
    """
    Decode one protocol line into a status event.

    Args:
        line: Tokenized line from the LineCodec.

    Returns:
        The decoded event, or None for unrecognized verbs and lines with
        missing or non-numeric arguments.

    Example:
        >>> decode_status_line(ParsedLine("R:GETLOAD", ("12", "75")))
        LoadChanged(vid='12', level=75)
    """
    handler = STATUS_HANDLERS.get(line.verb)
    if handler is None:
        return None

    try:
        return handler(line.verb, line.args)
    except (IndexError, ValueError) as e:
        logger.debug("Skipping malformed status line %r: %s", str(line), e)
        return None
