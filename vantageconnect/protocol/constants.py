"""
InFusion protocol verbs and constants.

The controller exposes two text protocols:
- Host command protocol (port 3001): newline-terminated command lines,
  replies prefixed with ``R:`` and unsolicited status prefixed with ``S:``.
- Configuration protocol (port 2001): XML request/response envelopes.
"""

from __future__ import annotations

from enum import Enum
from typing import Final


class Verb(str, Enum):
    """
    Command protocol verbs.

    Outbound verbs are sent by the client; ``S:`` verbs are status pushed
    by the controller after ``STATUSON`` and ``R:`` verbs are replies to
    outbound queries.
    """

    # ===== Outbound =====

    LOGIN = "LOGIN"
    """Authenticate the command session."""

    STATUSON = "STATUSON"
    """Subscribe to unsolicited status updates."""

    GETLOAD = "GETLOAD"
    """Query a load level."""

    INVOKE = "INVOKE"
    """Invoke an object method."""

    BLIND = "BLIND"
    """Blind control."""

    GETBLIND = "GETBLIND"
    """Query a blind position."""

    GETTHERMOP = "GETTHERMOP"
    """Query a thermostat operating mode."""

    GETTHERMTEMP = "GETTHERMTEMP"
    """Query a thermostat setpoint."""

    THERMOP = "THERMOP"
    """Set a thermostat operating mode."""

    THERMTEMP = "THERMTEMP"
    """Set a thermostat setpoint."""

    # ===== Inbound =====

    S_LOAD = "S:LOAD"
    R_GETLOAD = "R:GETLOAD"
    S_BLIND = "S:BLIND"
    R_GETBLIND = "R:GETBLIND"
    R_INVOKE = "R:INVOKE"
    S_THERMOP = "S:THERMOP"
    R_GETTHERMOP = "R:GETTHERMOP"
    R_THERMTEMP = "R:THERMTEMP"


class ProtocolConstants:
    """Protocol timing, ports and framing constants."""

    # ===== Ports =====

    COMMAND_PORT: Final[int] = 3001
    """Host command protocol port."""

    DISCOVERY_PORT: Final[int] = 2001
    """Configuration (backup) protocol port."""

    # ===== Timing (seconds) =====

    RECONNECT_DELAY: Final[float] = 5.0
    """Flat delay before the command channel reconnects."""

    DISCOVERY_CONNECT_TIMEOUT: Final[float] = 10.0
    """Ceiling for establishing the discovery connection."""

    DISCOVERY_RESPONSE_TIMEOUT: Final[float] = 60.0
    """Idle ceiling while waiting for discovery responses."""

    # ===== Framing =====

    LINE_TERMINATOR: Final[bytes] = b"\r\n"
    """Terminator appended to outbound command lines."""

    READ_CHUNK_SIZE: Final[int] = 4096
    """Maximum bytes requested per transport read."""

    # ===== Commands =====

    RAMP_SELECTOR: Final[int] = 6
    """Load.Ramp sub-command selecting "ramp to level over time"."""

    DEFAULT_RAMP_SECONDS: Final[float] = 1
    """Default ramp duration for set_load_level."""

    INDOOR_TEMPERATURE_METHOD: Final[str] = "Thermostat.GetIndoorTemperature"
    """Method name invoked to read a thermostat's indoor temperature."""

    LOAD_RAMP_METHOD: Final[str] = "Load.Ramp"
    """Method name invoked to ramp a load."""

    # ===== Backup document =====

    BACKUP_FILE_NAME: Final[str] = "Backup\\Project.dc"
    """Controller-side path of the project backup."""

    DEFAULT_BACKUP_FILE: Final[str] = "vantage_backup.xml"
    """Diagnostic copy file name, written under the user's home directory."""

    DEFAULT_AREA_NAME: Final[str] = "Main Area"
    """Area name used when a device has no area reference."""

    DEFAULT_AREA_ID: Final[str] = "default_area"
    """Identifier of the synthesized default area."""

    DEFAULT_VID_MIN: Final[int] = 0
    DEFAULT_VID_MAX: Final[int] = 999999999


# Verbs grouped by the event they produce

LOAD_STATUS_VERBS: Final[frozenset[str]] = frozenset({
    Verb.S_LOAD.value,
    Verb.R_GETLOAD.value,
})
"""Verbs reporting ``<vid> <level>``."""

BLIND_STATUS_VERBS: Final[frozenset[str]] = frozenset({
    Verb.S_BLIND.value,
    Verb.R_GETBLIND.value,
})
"""Verbs reporting ``<vid> <position>``."""

THERMOSTAT_MODE_VERBS: Final[frozenset[str]] = frozenset({
    Verb.S_THERMOP.value,
    Verb.R_GETTHERMOP.value,
    Verb.R_THERMTEMP.value,
})
"""Verbs reporting ``<vid> <mode> [<setpoint>]``."""

DEVICE_OBJECT_TYPES: Final[tuple[str, ...]] = (
    "Load",
    "Thermostat",
    "Blind",
    "RelayBlind",
    "QubeBlind",
)
"""Supported device type tags, in decode priority order."""

AREA_OBJECT_TYPE: Final[str] = "Area"
"""Type tag of area records."""
