"""
Parsing engine for controller data.

This package converts raw protocol data into structured Python objects:

1. **Status Parser**: decode command-channel lines into status events
2. **Object Registry**: Strategy pattern recognizing backup object shapes
3. **Backup Parser**: cascade of strategies recovering areas and devices
   from the project backup, tolerant of malformed documents

Example:
    >>> from vantageconnect.parsers import parse_backup
    >>>
    >>> contents = parse_backup(document)
    >>> for device in contents.devices:
    ...     print(device.name, device.area)
"""

from vantageconnect.parsers.backup_parser import (
    AreaOnlyStrategy,
    BackupContents,
    BackupParser,
    BackupParseStrategy,
    DirectExtractionStrategy,
    StructuredBackupStrategy,
    default_strategies,
    extract_areas_directly,
    parse_backup,
    resolve_area_name,
)
from vantageconnect.parsers.object_registry import (
    AreaDecoder,
    DecodedArea,
    DecodedDevice,
    DeviceDecoder,
    ObjectDecoder,
    ObjectDecoderRegistry,
    coerce_value,
    create_default_registry,
)
from vantageconnect.parsers.status_parser import STATUS_HANDLERS, decode_status_line

__all__ = [
    # Status Parser
    "decode_status_line",
    "STATUS_HANDLERS",
    # Object Registry
    "ObjectDecoderRegistry",
    "ObjectDecoder",
    "DeviceDecoder",
    "AreaDecoder",
    "DecodedArea",
    "DecodedDevice",
    "coerce_value",
    "create_default_registry",
    # Backup Parser
    "BackupParser",
    "BackupParseStrategy",
    "StructuredBackupStrategy",
    "DirectExtractionStrategy",
    "AreaOnlyStrategy",
    "BackupContents",
    "default_strategies",
    "extract_areas_directly",
    "resolve_area_name",
    "parse_backup",
]
