"""
Event payloads raised by the controller client.

Events are ephemeral: they exist only as callback payloads and are never
stored by the library. Status events come from the command channel;
DiscoveryComplete comes from the discovery channel.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from vantageconnect.models.records import Device, ThermostatMode


@dataclass(frozen=True)
class Event:
    """Base class for all published events."""


@dataclass(frozen=True)
class StatusEvent(Event):
    """
    Base class for status changes decoded from the command channel.

    Attributes:
        vid: Virtual identifier of the reporting object.
    """

    vid: str


@dataclass(frozen=True)
class LoadChanged(StatusEvent):
    """A load reported a new level (0-100)."""

    level: int


@dataclass(frozen=True)
class BlindChanged(StatusEvent):
    """A blind reported a new position (0-100)."""

    position: int


@dataclass(frozen=True)
class ThermostatTemperatureChanged(StatusEvent):
    """A thermostat reported its indoor temperature in degrees Celsius."""

    temperature: float


@dataclass(frozen=True)
class ThermostatModeChanged(StatusEvent):
    """
    A thermostat reported its operating mode.

    Attributes:
        mode: Decoded operating mode.
        setpoint: Reported setpoint, only present for setpoint replies.
    """

    mode: ThermostatMode
    setpoint: float | None = None


@dataclass(frozen=True)
class DiscoveryComplete(Event):
    """A discovery run finished; devices may be empty."""

    devices: tuple[Device, ...] = field(default_factory=tuple)
