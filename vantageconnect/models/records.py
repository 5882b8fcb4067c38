"""
Pydantic models for controller topology records.

This module defines the area and device records recovered from the
controller's project backup, implemented as immutable Pydantic models.

Design principles:
- All models are frozen (immutable) by default
- Identifiers are opaque strings; the controller's own uniqueness is trusted
- Optional backup fields are None rather than empty strings
"""

from __future__ import annotations

from enum import Enum, IntEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vantageconnect.protocol.constants import ProtocolConstants


class ObjectType(str, Enum):
    """Supported device object types, named after their backup type tags."""

    LOAD = "Load"
    THERMOSTAT = "Thermostat"
    BLIND = "Blind"
    RELAY_BLIND = "RelayBlind"
    QUBE_BLIND = "QubeBlind"

    @property
    def is_blind(self) -> bool:
        """Check if this type is one of the blind variants."""
        return self in (ObjectType.BLIND, ObjectType.RELAY_BLIND, ObjectType.QUBE_BLIND)


class ThermostatMode(IntEnum):
    """Thermostat operating modes."""

    OFF = 0
    HEAT = 1
    COOL = 2
    AUTO = 3

    @classmethod
    def from_token(cls, token: str) -> ThermostatMode:
        """
        Decode a controller mode token by substring match.

        Anything not containing OFF, HEAT or COOL is AUTO.

        Example:
            >>> ThermostatMode.from_token("HEAT")
            <ThermostatMode.HEAT: 1>
        """
        upper = token.upper()
        if "OFF" in upper:
            return cls.OFF
        if "HEAT" in upper:
            return cls.HEAT
        if "COOL" in upper:
            return cls.COOL
        return cls.AUTO


class Area(BaseModel):
    """
    Area (room) record from the project backup.

    Areas exist only for the duration of one discovery pass, to resolve
    device area names.

    Example:
        >>> area = Area(id="10", name="Kitchen")
        >>> str(area)
        'Kitchen'
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1, description="Controller object identifier")
    name: str = Field(description="Display name")

    def __str__(self) -> str:
        return self.name


class Device(BaseModel):
    """
    Controllable device discovered in the project backup.

    Identity is the VID. The controller is trusted to keep VIDs unique;
    collaborators keying devices by VID simply overwrite duplicates.

    Example:
        >>> device = Device(vid="55", name="Lamp", object_type=ObjectType.LOAD)
        >>> device.area
        'Main Area'
    """

    model_config = ConfigDict(frozen=True)

    vid: str = Field(min_length=1, description="Virtual identifier")
    name: str
    object_type: ObjectType
    load_type: str | None = None
    device_category: str | None = None
    area: str = ProtocolConstants.DEFAULT_AREA_NAME

    @field_validator("load_type", "device_category")
    @classmethod
    def empty_as_none(cls, v: str | None) -> str | None:
        """Normalize empty optional fields to None."""
        if v is None:
            return None
        v = v.strip()
        return v or None

    def __str__(self) -> str:
        return f"{self.name} ({self.object_type.value} {self.vid}, {self.area})"
