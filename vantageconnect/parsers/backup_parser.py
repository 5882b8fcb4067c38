"""
Project backup parsing.

The decoded backup is an XML export of the controller's project. Its
layout differs between firmware versions and exports are not always
well-formed, so parsing is an ordered cascade of strategies sharing one
contract, ``parse(text, device_filter) -> BackupContents``:

1. StructuredBackupStrategy: tree parse of the object collection
2. DirectExtractionStrategy: per-type regex scan of the raw text
3. AreaOnlyStrategy: area records only, no devices

A strategy that raises or finds no devices hands over to the next one.
The cascade itself never raises: the worst outcome is an empty device
list.

Example:
    >>> parser = BackupParser()
    >>> contents = parser.parse(document, config.device_filter())
    >>> for device in contents.devices:
    ...     print(device.vid, device.name, device.area)
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Final
from xml.etree.ElementTree import ParseError as XMLParseError

import defusedxml.ElementTree as ET
from defusedxml import DefusedXmlException

from vantageconnect.config import ALLOW_ALL, DeviceFilter
from vantageconnect.exceptions import ParseError
from vantageconnect.models.records import Area, Device, ObjectType
from vantageconnect.parsers.object_registry import (
    DecodedArea,
    DecodedDevice,
    ObjectDecoderRegistry,
    coerced_text,
    create_default_registry,
)
from vantageconnect.protocol.constants import ProtocolConstants

logger = logging.getLogger(__name__)

_LINE_BREAKS: Final[re.Pattern[str]] = re.compile(r"[\r\n]")
_OBJECTS_SECTION: Final[re.Pattern[str]] = re.compile(r"<Objects\b[^>]*>(.*?)</Objects>", re.DOTALL)
_PROJECT_SECTION: Final[re.Pattern[str]] = re.compile(r"<Project\b[^>]*>(.*)</Project>", re.DOTALL)
_TOP_LEVEL_AREA: Final[re.Pattern[str]] = re.compile(
    r'<Object>\s*<Area\s+VID="([^"]+)"[^>]*>.*?<Name>([^<]+)</Name>.*?</Area>\s*</Object>',
    re.DOTALL,
)

_VID_ATTRIBUTE: Final[re.Pattern[str]] = re.compile(r'\bVID="([^"]+)"')
_VID_ELEMENT: Final[re.Pattern[str]] = re.compile(r"<VID>([^<]+)</VID>")
_NUMBER_ELEMENT: Final[re.Pattern[str]] = re.compile(r"<Number>([^<]+)</Number>")
_NAME_ELEMENT: Final[re.Pattern[str]] = re.compile(r"<Name>([^<]+)</Name>")
_AREA_ELEMENT: Final[re.Pattern[str]] = re.compile(r"<Area>([^<]+)</Area>")
_LOAD_TYPE_ELEMENT: Final[re.Pattern[str]] = re.compile(r"<LoadType>([^<]+)</LoadType>")
_DEVICE_CATEGORY_ELEMENT: Final[re.Pattern[str]] = re.compile(
    r"<DeviceCategory>([^<]+)</DeviceCategory>"
)


@dataclass
class BackupContents:
    """
    Areas and devices recovered from one backup document.

    Attributes:
        areas: Areas keyed by identifier.
        devices: Devices in document order, already filtered.
        strategy: Name of the strategy that produced the result.
    """

    areas: dict[str, Area] = field(default_factory=dict)
    devices: list[Device] = field(default_factory=list)
    strategy: str = ""

    @property
    def is_empty(self) -> bool:
        """Check if no devices were recovered."""
        return not self.devices


def default_area() -> Area:
    """Create the synthesized area used when a backup defines none."""
    return Area(id=ProtocolConstants.DEFAULT_AREA_ID, name=ProtocolConstants.DEFAULT_AREA_NAME)


def flatten(text: str) -> str:
    """Remove line breaks so records can be scanned as single lines."""
    return _LINE_BREAKS.sub("", text)


def find_areas_directly(text: str) -> dict[str, Area]:
    """
    Scan for area records nested one level inside an Object wrapper.

    Only areas with a VID attribute and a Name element are recognized.
    """
    areas: dict[str, Area] = {}
    for match in _TOP_LEVEL_AREA.finditer(text):
        area_id = coerced_text(match.group(1))
        name = match.group(2).strip()
        if area_id and area_id not in areas:
            areas[area_id] = Area(id=area_id, name=name)
    return areas


def extract_areas_directly(text: str) -> dict[str, Area]:
    """
    Extract top-level areas, synthesizing the default area if none exist.

    Args:
        text: Backup document text.

    Returns:
        Areas keyed by identifier; never empty.
    """
    areas = find_areas_directly(flatten(text))
    if not areas:
        area = default_area()
        areas[area.id] = area
    logger.debug("Found %d top-level areas using direct extraction", len(areas))
    return areas


def resolve_area_name(area_ref: str, areas: dict[str, Area]) -> str:
    """
    Resolve a device's area reference to a display name.

    Returns:
        The area's name if known, "Area <ref>" for an unknown reference,
        or "Main Area" when the device has no reference.
    """
    if not area_ref:
        return ProtocolConstants.DEFAULT_AREA_NAME
    area = areas.get(area_ref)
    if area is not None:
        return area.name
    return f"Area {area_ref}"


def build_device(
    decoded: DecodedDevice,
    areas: dict[str, Area],
) -> Device:
    """Turn a decoded record into a Device with its area name resolved."""
    return Device(
        vid=decoded.vid,
        name=decoded.name,
        object_type=decoded.object_type,
        load_type=decoded.load_type or None,
        device_category=decoded.device_category or None,
        area=resolve_area_name(decoded.area_ref, areas),
    )


class BackupParseStrategy(ABC):
    """
    Abstract base class for backup parsing strategies.

    Implementations should:
    1. Define the name property
    2. Implement parse() returning BackupContents, raising ParseError
       when the document is unusable for this strategy
    3. Apply the device filter during extraction
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short strategy name for logs."""
        ...

    @abstractmethod
    def parse(self, text: str, device_filter: DeviceFilter) -> BackupContents:
        """
        Parse a backup document.

        Args:
            text: Decoded backup document.
            device_filter: Omit list and VID range to apply.

        Returns:
            Recovered areas and devices.

        Raises:
            ParseError: If the document cannot be handled by this strategy.
        """
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class StructuredBackupStrategy(BackupParseStrategy):
    """
    Tree-based parse of the object collection.

    The collection is the ``<Objects>`` section, or the ``<Project>``
    section when no Objects container exists. Areas are collected first
    (explicitly tagged, then implicit), devices second.
    """

    def __init__(self, registry: ObjectDecoderRegistry | None = None) -> None:
        self._registry = registry or create_default_registry()

    @property
    def name(self) -> str:
        return "structured"

    def parse(self, text: str, device_filter: DeviceFilter) -> BackupContents:
        flat = flatten(text)
        section = self._object_section(flat)

        try:
            root = ET.fromstring(f"<Objects>{section}</Objects>")
        except (XMLParseError, DefusedXmlException) as e:
            raise ParseError(
                f"Object collection is not well-formed XML: {e}",
                strategy=self.name,
                raw_data=section[:200],
            ) from e

        decoded = [self._registry.decode(node) for node in root]
        logger.debug("Found %d objects in backup file", len(decoded))

        areas = find_areas_directly(flat)
        decoded_areas = [item for item in decoded if isinstance(item, DecodedArea)]
        for item in decoded_areas:
            if item.explicit:
                areas[item.id] = Area(id=item.id, name=item.name)
        for item in decoded_areas:
            if not item.explicit and item.id not in areas:
                areas[item.id] = Area(id=item.id, name=item.name)
        if not areas:
            area = default_area()
            areas[area.id] = area
        logger.info("Found %d areas in backup file", len(areas))

        devices: list[Device] = []
        for item in decoded:
            if not isinstance(item, DecodedDevice):
                continue
            if not item.vid:
                logger.debug("Skipping %s %r without VID", item.object_type.value, item.name)
                continue
            if not device_filter.allows(item.vid):
                continue
            devices.append(build_device(item, areas))

        logger.info("Discovered %d devices", len(devices))
        return BackupContents(areas=areas, devices=devices, strategy=self.name)

    def _object_section(self, flat: str) -> str:
        match = _OBJECTS_SECTION.search(flat)
        if match is None:
            logger.debug("Could not find Objects section, trying Project section")
            match = _PROJECT_SECTION.search(flat)
        if match is None:
            raise ParseError(
                "Could not find Project or Objects section in backup file",
                strategy=self.name,
            )
        return match.group(1)


class DirectExtractionStrategy(BackupParseStrategy):
    """
    Regex scan for device records in the raw text.

    Survives documents the tree parser rejects. Each supported type tag is
    scanned for ``<Type ...>...</Type>`` spans; identifier, name, area,
    load type and category come from independent sub-patterns.
    """

    def __init__(self) -> None:
        self._patterns = {
            object_type: re.compile(
                rf"<{object_type.value}((?:\s[^>]*)?)(?<!/)>(.*?)</{object_type.value}>",
                re.DOTALL,
            )
            for object_type in ObjectType
        }

    @property
    def name(self) -> str:
        return "direct"

    def parse(self, text: str, device_filter: DeviceFilter) -> BackupContents:
        flat = flatten(text)
        areas = extract_areas_directly(flat)

        devices: list[Device] = []
        for object_type, pattern in self._patterns.items():
            for match in pattern.finditer(flat):
                decoded = self._decode_match(object_type, match.group(1), match.group(2))
                if decoded is None:
                    continue
                if not device_filter.allows(decoded.vid):
                    continue
                devices.append(build_device(decoded, areas))

        logger.info("Discovered %d devices using direct extraction", len(devices))
        return BackupContents(areas=areas, devices=devices, strategy=self.name)

    @staticmethod
    def _decode_match(object_type: ObjectType, attributes: str, body: str) -> DecodedDevice | None:
        vid = _first_group(_VID_ATTRIBUTE, attributes)
        if not vid:
            vid = _first_group(_VID_ELEMENT, body) or _first_group(_NUMBER_ELEMENT, body)
        name = _first_group(_NAME_ELEMENT, body)
        if not vid or not name:
            return None

        return DecodedDevice(
            object_type=object_type,
            vid=coerced_text(vid),
            name=name,
            load_type=_first_group(_LOAD_TYPE_ELEMENT, body),
            device_category=_first_group(_DEVICE_CATEGORY_ELEMENT, body),
            area_ref=coerced_text(_first_group(_AREA_ELEMENT, body)),
        )


class AreaOnlyStrategy(BackupParseStrategy):
    """Last resort: report the document's areas and no devices."""

    @property
    def name(self) -> str:
        return "areas"

    def parse(self, text: str, device_filter: DeviceFilter) -> BackupContents:
        return BackupContents(areas=extract_areas_directly(text), strategy=self.name)


def _first_group(pattern: re.Pattern[str], text: str) -> str:
    match = pattern.search(text)
    return match.group(1).strip() if match else ""


def default_strategies() -> list[BackupParseStrategy]:
    """Create the standard cascade: structured, direct, areas."""
    return [StructuredBackupStrategy(), DirectExtractionStrategy(), AreaOnlyStrategy()]


class BackupParser:
    """
    Runs backup parsing strategies in order until one yields devices.

    Example:
        >>> parser = BackupParser()
        >>> contents = parser.parse(document)
        >>> contents.strategy
        'structured'
    """

    def __init__(self, strategies: Sequence[BackupParseStrategy] | None = None) -> None:
        self._strategies = list(strategies) if strategies is not None else default_strategies()

    @property
    def strategies(self) -> tuple[BackupParseStrategy, ...]:
        """Strategies in the order they are tried."""
        return tuple(self._strategies)

    def parse(self, text: str, device_filter: DeviceFilter = ALLOW_ALL) -> BackupContents:
        """
        Parse a backup document.

        Args:
            text: Decoded backup document.
            device_filter: Omit list and VID range to apply.

        Returns:
            The first result with devices, otherwise the last result
            obtained (possibly empty).
        """
        result = BackupContents()
        for strategy in self._strategies:
            try:
                result = strategy.parse(text, device_filter)
            except ParseError as e:
                logger.warning("Backup parse (%s) failed: %s", strategy.name, e)
                continue
            except Exception as e:  # noqa: BLE001
                logger.error("Error processing backup file with %s strategy: %s", strategy.name, e)
                logger.debug("Backup parse failure details", exc_info=True)
                continue

            if not result.is_empty:
                return result
            logger.debug("Backup parse (%s) found no devices", strategy.name)
        return result

    def __repr__(self) -> str:
        names = ", ".join(strategy.name for strategy in self._strategies)
        return f"BackupParser({names})"


def parse_backup(text: str, device_filter: DeviceFilter = ALLOW_ALL) -> BackupContents:
    """
    Parse a backup document with the default cascade.

    Args:
        text: Decoded backup document.
        device_filter: Omit list and VID range to apply.

    Returns:
        Recovered areas and devices; never raises.
    """
    return BackupParser().parse(text, device_filter)
