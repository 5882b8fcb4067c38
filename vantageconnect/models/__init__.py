"""
Data models for controller records and events.

This module contains:

- Topology records recovered from the project backup (Area, Device)
- Enums for object types and thermostat modes
- Event payloads published by the client
"""

from vantageconnect.models.events import (
    BlindChanged,
    DiscoveryComplete,
    Event,
    LoadChanged,
    StatusEvent,
    ThermostatModeChanged,
    ThermostatTemperatureChanged,
)
from vantageconnect.models.records import Area, Device, ObjectType, ThermostatMode

__all__ = [
    # Records
    "Area",
    "Device",
    # Enums
    "ObjectType",
    "ThermostatMode",
    # Events
    "Event",
    "StatusEvent",
    "LoadChanged",
    "BlindChanged",
    "ThermostatTemperatureChanged",
    "ThermostatModeChanged",
    "DiscoveryComplete",
]
