"""
Controller connection configuration.

Configuration is validated once, synchronously, before any connection is
attempted. These are the only errors that abort initialization; every
later failure is handled inside the channels.

Example:
    >>> config = ControllerConfig.from_mapping({
    ...     "ipaddress": "192.168.1.100",
    ...     "username": "admin",
    ...     "password": "secret",
    ...     "omit": "12,13",
    ...     "range": "1,500",
    ... })
    >>> config.device_filter().allows("12")
    False
"""

from __future__ import annotations

import ipaddress
import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from vantageconnect.exceptions import ConfigurationError
from vantageconnect.protocol.constants import ProtocolConstants

_DOTTED_QUAD: Final[re.Pattern[str]] = re.compile(r"^[\d.]+$")


@dataclass(frozen=True)
class DeviceFilter:
    """
    VID filter applied while extracting devices from the backup.

    A VID is rejected if it is in the omit list, or if it is numeric and
    outside the inclusive [vid_min, vid_max] range. Non-numeric VIDs are
    only subject to the omit list.
    """

    omit: frozenset[str] = frozenset()
    vid_min: int = ProtocolConstants.DEFAULT_VID_MIN
    vid_max: int = ProtocolConstants.DEFAULT_VID_MAX

    def allows(self, vid: str) -> bool:
        """Check if a device with this VID should be reported."""
        if vid in self.omit:
            return False
        try:
            number = int(vid)
        except ValueError:
            return True
        return self.vid_min <= number <= self.vid_max


ALLOW_ALL = DeviceFilter()
"""Filter that accepts every VID."""


class ControllerConfig(BaseModel):
    """
    Connection parameters for one controller.

    Attributes:
        host: Controller IP address or host name.
        username: Optional login user; requires password.
        password: Optional login password; requires username.
        omit: VIDs excluded from discovery.
        vid_range: Inclusive (min, max) VID range kept by discovery.
        debug: Log every protocol line at DEBUG level.
        backup_path: Where the decoded backup is written after discovery.
    """

    model_config = ConfigDict(frozen=True)

    host: str = Field(min_length=1)
    username: str | None = None
    password: str | None = None
    omit: frozenset[str] = frozenset()
    vid_range: tuple[int, int] = (
        ProtocolConstants.DEFAULT_VID_MIN,
        ProtocolConstants.DEFAULT_VID_MAX,
    )
    debug: bool = False

    command_port: int = Field(default=ProtocolConstants.COMMAND_PORT, gt=0, lt=65536)
    discovery_port: int = Field(default=ProtocolConstants.DISCOVERY_PORT, gt=0, lt=65536)
    reconnect_delay: float = Field(default=ProtocolConstants.RECONNECT_DELAY, ge=0)
    discovery_timeout: float = Field(default=ProtocolConstants.DISCOVERY_CONNECT_TIMEOUT, gt=0)
    response_timeout: float = Field(default=ProtocolConstants.DISCOVERY_RESPONSE_TIMEOUT, gt=0)
    backup_path: Path = Field(
        default_factory=lambda: Path.home() / ProtocolConstants.DEFAULT_BACKUP_FILE
    )

    @field_validator("host")
    @classmethod
    def validate_host(cls, v: str) -> str:
        """Reject blank hosts, hosts with whitespace and malformed IPv4 addresses."""
        v = v.strip()
        if not v or any(c.isspace() for c in v):
            raise ValueError(f"invalid controller address: {v!r}")
        if _DOTTED_QUAD.match(v):
            try:
                ipaddress.IPv4Address(v)
            except ValueError as e:
                raise ValueError(f"invalid IP address format: {v!r}") from e
        return v

    @field_validator("username", "password", mode="before")
    @classmethod
    def blank_as_none(cls, v: Any) -> Any:
        """Treat empty credentials as absent."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("omit", mode="before")
    @classmethod
    def parse_omit(cls, v: Any) -> Any:
        """Accept a comma-separated string of numeric VIDs."""
        if v is None:
            return frozenset()
        if isinstance(v, str):
            items = [item.strip() for item in v.split(",") if item.strip()]
        else:
            items = [str(item).strip() for item in v]
        for item in items:
            if not item.isdigit():
                raise ValueError(
                    "omit list must contain only numbers separated by commas"
                )
        return frozenset(items)

    @field_validator("vid_range", mode="before")
    @classmethod
    def parse_range(cls, v: Any) -> Any:
        """Accept a "min,max" string."""
        if v is None:
            return (ProtocolConstants.DEFAULT_VID_MIN, ProtocolConstants.DEFAULT_VID_MAX)
        if isinstance(v, str):
            parts = [part.strip() for part in v.split(",")]
            try:
                v = tuple(int(part) for part in parts)
            except ValueError as e:
                raise ValueError("range must be two numbers separated by a comma") from e
        if not isinstance(v, (tuple, list)) or len(v) != 2:
            raise ValueError("range must be two numbers separated by a comma")
        return tuple(v)

    @model_validator(mode="after")
    def validate_consistency(self) -> ControllerConfig:
        """Check the credential pair and range ordering."""
        if (self.username is None) != (self.password is None):
            raise ValueError(
                "both username and password must be provided if using authentication"
            )
        low, high = self.vid_range
        if low >= high:
            raise ValueError("range minimum must be less than its maximum")
        return self

    @property
    def has_credentials(self) -> bool:
        """Check if login credentials are configured."""
        return self.username is not None and self.password is not None

    def device_filter(self) -> DeviceFilter:
        """Build the VID filter for discovery."""
        return DeviceFilter(
            omit=self.omit,
            vid_min=self.vid_range[0],
            vid_max=self.vid_range[1],
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ControllerConfig:
        """
        Build a configuration from platform-style settings.

        Recognizes ``ipaddress`` (or ``host``), ``username``, ``password``,
        ``omit``, ``range`` (or ``vid_range``) and ``debug``; other keys
        matching field names are passed through, the rest are ignored.

        Raises:
            ConfigurationError: If the settings are invalid.
        """
        values = {key: value for key, value in data.items() if key in cls.model_fields}
        if "ipaddress" in data:
            values["host"] = data["ipaddress"]
        if "range" in data:
            values["vid_range"] = data["range"]
        if "host" not in values:
            raise ConfigurationError("Configuration error: ipaddress is required")

        try:
            return cls(**values)
        except ValidationError as e:
            messages = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
                for err in e.errors()
            )
            raise ConfigurationError(f"Configuration error: {messages}") from e

    def __repr__(self) -> str:
        user = self.username or "None"
        return f"ControllerConfig(host={self.host!r}, user={user!r}, debug={self.debug})"
