"""
Object decoder registry for backup documents.

Each record in the backup's object collection is a node whose child tag
names the object type:

    <Object>
      <Load VID="55"><Name>Lamp</Name><Area>10</Area><LoadType>Incandescent</LoadType></Load>
    </Object>

This module implements the Strategy pattern for recognizing those shapes.
Decoders are tried in a fixed priority order and the first match is
returned as a tagged variant (DecodedDevice or DecodedArea).

Architecture:
    ObjectDecoderRegistry
        ├── DeviceDecoder(Load)
        ├── DeviceDecoder(Thermostat)
        ├── DeviceDecoder(Blind)
        ├── DeviceDecoder(RelayBlind)
        ├── DeviceDecoder(QubeBlind)
        └── AreaDecoder
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from vantageconnect.models.records import ObjectType
from vantageconnect.protocol.constants import AREA_OBJECT_TYPE

if TYPE_CHECKING:
    from xml.etree.ElementTree import Element

_INT_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[+-]?\d+$")
_FLOAT_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[+-]?(\d+\.\d*|\.\d+)([eE][+-]?\d+)?$")

OBJECT_WRAPPER_TAG: Final[str] = "Object"
TYPE_TAG: Final[str] = "ObjectType"


def coerce_value(raw: str | None) -> int | float | str | None:
    """
    Coerce attribute or element text to a number where it looks like one.

    Example:
        >>> coerce_value(" 007 ")
        7
        >>> coerce_value("Kitchen")
        'Kitchen'
    """
    if raw is None:
        return None
    text = raw.strip()
    if _INT_PATTERN.match(text):
        return int(text)
    if _FLOAT_PATTERN.match(text):
        return float(text)
    return text


def coerced_text(raw: str | None) -> str:
    """Coerce a value and render it back to text; missing values become ""."""
    value = coerce_value(raw)
    if value is None:
        return ""
    return str(value)


def attribute_or_child(node: Element, name: str) -> str:
    """
    Read a field that may be an attribute or a child element.

    The attribute takes precedence. Values are coerced; missing fields
    return "".
    """
    if name in node.attrib:
        value = coerced_text(node.attrib[name])
        if value:
            return value
    return coerced_text(node.findtext(name))


def child_text(node: Element, *names: str) -> str:
    """Return the first non-empty child text among names, stripped."""
    for name in names:
        text = node.findtext(name)
        if text and text.strip():
            return text.strip()
    return ""


def type_tag(node: Element) -> str:
    """Get the explicit ObjectType tag of a node, if any."""
    return attribute_or_child(node, TYPE_TAG)


@dataclass(frozen=True)
class DecodedArea:
    """
    An area record.

    Attributes:
        id: Area identifier (coerced VID).
        name: Display name.
        explicit: True when tagged ObjectType=Area, False for the implicit
            shape (VID attribute and a name, no type tag).
    """

    id: str
    name: str
    explicit: bool


@dataclass(frozen=True)
class DecodedDevice:
    """
    A device record before filtering and area resolution.

    Attributes:
        object_type: Device kind.
        vid: Identifier, "" if the record has none.
        name: Display name.
        load_type: LoadType text, "" if absent.
        device_category: DeviceCategory text, "" if absent.
        area_ref: Raw area reference, "" if absent.
    """

    object_type: ObjectType
    vid: str
    name: str
    load_type: str
    device_category: str
    area_ref: str


DecodedObject = DecodedArea | DecodedDevice


class ObjectDecoder(ABC):
    """
    Abstract base class for object decoding strategies.

    Implementations should:
    1. Define the tag property (the type tag they recognize)
    2. Implement decode() returning a variant, or None when the node
       does not have the expected shape
    """

    @property
    @abstractmethod
    def tag(self) -> str:
        """
        The type tag this decoder handles.

        Returns:
            Element tag name (e.g. "Load").
        """
        ...

    @abstractmethod
    def decode(self, node: Element) -> DecodedObject | None:
        """
        Decode one typed node.

        Args:
            node: Element whose tag equals this decoder's tag, or an
                Object wrapper carrying an explicit matching type tag.

        Returns:
            Decoded variant, or None if the shape does not match.
        """
        ...


class DeviceDecoder(ObjectDecoder):
    """Decodes one of the supported device kinds."""

    def __init__(self, object_type: ObjectType) -> None:
        self._object_type = object_type

    @property
    def tag(self) -> str:
        return self._object_type.value

    def decode(self, node: Element) -> DecodedDevice:
        name = child_text(node, "Name", "DName") or f"Unknown {self.tag}"
        return DecodedDevice(
            object_type=self._object_type,
            vid=attribute_or_child(node, "VID"),
            name=name,
            load_type=child_text(node, "LoadType"),
            device_category=child_text(node, "DeviceCategory"),
            area_ref=_area_reference(node),
        )

    def __repr__(self) -> str:
        return f"DeviceDecoder({self.tag})"


class AreaDecoder(ObjectDecoder):
    """Decodes explicit and implicit area records."""

    @property
    def tag(self) -> str:
        return AREA_OBJECT_TYPE

    def decode(self, node: Element) -> DecodedArea | None:
        declared = type_tag(node)
        if declared and declared != AREA_OBJECT_TYPE:
            return None

        explicit = declared == AREA_OBJECT_TYPE
        if explicit:
            area_id = attribute_or_child(node, "VID")
        else:
            area_id = coerced_text(node.attrib.get("VID"))

        name = child_text(node, "Name", "DName")
        if not area_id or (not explicit and not name):
            return None
        return DecodedArea(id=area_id, name=name or "Unknown", explicit=explicit)

    def __repr__(self) -> str:
        return "AreaDecoder()"


def _area_reference(node: Element) -> str:
    """Get a device's area reference: <Area>10</Area> or <Area VID="10"/>."""
    area = node.find("Area")
    if area is None:
        return ""
    if area.text and area.text.strip():
        return coerced_text(area.text)
    return attribute_or_child(area, "VID")


class ObjectDecoderRegistry:
    """
    Ordered registry of object decoders.

    Decoders are tried in registration order; for an Object wrapper every
    decoder is matched against the wrapper's children before the next
    decoder is tried, so a higher-priority kind always wins.

    Example:
        >>> registry = create_default_registry()
        >>> decoded = registry.decode(object_element)
        >>> if isinstance(decoded, DecodedDevice):
        ...     print(decoded.object_type, decoded.vid)
    """

    def __init__(self) -> None:
        """Initialize empty registry."""
        self._decoders: list[ObjectDecoder] = []

    def register(self, decoder: ObjectDecoder) -> None:
        """
        Register a decoder at the lowest priority.

        Note:
            Replaces any existing decoder for the same tag, keeping its
            priority slot.
        """
        for index, existing in enumerate(self._decoders):
            if existing.tag == decoder.tag:
                self._decoders[index] = decoder
                return
        self._decoders.append(decoder)

    def get(self, tag: str) -> ObjectDecoder | None:
        """Get the decoder registered for a tag."""
        for decoder in self._decoders:
            if decoder.tag == tag:
                return decoder
        return None

    @property
    def tags(self) -> tuple[str, ...]:
        """Registered tags in priority order."""
        return tuple(decoder.tag for decoder in self._decoders)

    def decode(self, node: Element) -> DecodedObject | None:
        """
        Decode one entry of the object collection.

        Args:
            node: An Object wrapper, or a typed node placed directly in
                the collection.

        Returns:
            The first successful variant, or None for unsupported objects.
        """
        if node.tag == OBJECT_WRAPPER_TAG:
            candidates = list(node)
            # A wrapper may carry the type tag itself
            declared = type_tag(node)
            if declared:
                candidates.insert(0, node)
        else:
            candidates = [node]

        for decoder in self._decoders:
            for candidate in candidates:
                if candidate.tag != decoder.tag and type_tag(candidate) != decoder.tag:
                    continue
                decoded = decoder.decode(candidate)
                if decoded is not None:
                    return decoded
        return None

    def __len__(self) -> int:
        return len(self._decoders)

    def __repr__(self) -> str:
        return f"ObjectDecoderRegistry({', '.join(self.tags)})"


def create_default_registry() -> ObjectDecoderRegistry:
    """
    Create a registry with the five device kinds followed by areas.

    Returns:
        ObjectDecoderRegistry in decode priority order.
    """
    registry = ObjectDecoderRegistry()
    for object_type in ObjectType:
        registry.register(DeviceDecoder(object_type))
    registry.register(AreaDecoder())
    return registry
