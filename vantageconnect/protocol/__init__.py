"""
Protocol layer for InFusion communication.

This module contains the low-level protocol handling:
- Verbs, ports and protocol constants
- Line framing and tokenizing for the command protocol
- Outbound command encoding
- XML envelopes for the discovery protocol
"""

from vantageconnect.protocol.constants import (
    BLIND_STATUS_VERBS,
    DEVICE_OBJECT_TYPES,
    LOAD_STATUS_VERBS,
    THERMOSTAT_MODE_VERBS,
    ProtocolConstants,
    Verb,
)
from vantageconnect.protocol.encoding import (
    encode_blind_position,
    encode_command,
    encode_get_blind,
    encode_get_indoor_temperature,
    encode_get_load,
    encode_get_thermostat_mode,
    encode_get_thermostat_setpoint,
    encode_load_ramp,
    encode_login,
    encode_status_on,
    encode_thermostat_mode,
    encode_thermostat_setpoint,
    format_number,
    mode_token,
)
from vantageconnect.protocol.envelopes import (
    BACKUP_REQUEST,
    BackupResponse,
    EnvelopeReader,
    LoginResponse,
    build_login_request,
    decode_backup_payload,
)
from vantageconnect.protocol.line_codec import LineCodec, ParsedLine

__all__ = [
    # Constants
    "Verb",
    "ProtocolConstants",
    "LOAD_STATUS_VERBS",
    "BLIND_STATUS_VERBS",
    "THERMOSTAT_MODE_VERBS",
    "DEVICE_OBJECT_TYPES",
    # Line framing
    "LineCodec",
    "ParsedLine",
    # Encoding
    "encode_command",
    "encode_login",
    "encode_status_on",
    "encode_get_load",
    "encode_load_ramp",
    "encode_blind_position",
    "encode_get_blind",
    "encode_get_indoor_temperature",
    "encode_get_thermostat_mode",
    "encode_get_thermostat_setpoint",
    "encode_thermostat_mode",
    "encode_thermostat_setpoint",
    "format_number",
    "mode_token",
    # Envelopes
    "BACKUP_REQUEST",
    "build_login_request",
    "decode_backup_payload",
    "EnvelopeReader",
    "LoginResponse",
    "BackupResponse",
]
