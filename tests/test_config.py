"""Tests for controller configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from vantageconnect.config import ALLOW_ALL, ControllerConfig, DeviceFilter
from vantageconnect.exceptions import ConfigurationError


class TestDeviceFilter:
    """Tests for DeviceFilter."""

    def test_allow_all(self):
        assert ALLOW_ALL.allows("0")
        assert ALLOW_ALL.allows("999999999")
        assert not ALLOW_ALL.allows("1000000000")

    def test_omit_list(self):
        device_filter = DeviceFilter(omit=frozenset({"56"}))
        assert not device_filter.allows("56")
        assert device_filter.allows("55")

    def test_range_is_inclusive(self):
        device_filter = DeviceFilter(vid_min=50, vid_max=60)
        assert device_filter.allows("50")
        assert device_filter.allows("60")
        assert not device_filter.allows("49")
        assert not device_filter.allows("61")

    def test_non_numeric_vid_only_checked_against_omit(self):
        device_filter = DeviceFilter(omit=frozenset({"abc"}), vid_min=50, vid_max=60)
        assert device_filter.allows("xyz")
        assert not device_filter.allows("abc")


class TestControllerConfig:
    """Tests for ControllerConfig validation."""

    def test_defaults(self):
        config = ControllerConfig(host="192.168.1.100")
        assert config.command_port == 3001
        assert config.discovery_port == 2001
        assert config.reconnect_delay == 5.0
        assert config.discovery_timeout == 10.0
        assert config.vid_range == (0, 999999999)
        assert config.omit == frozenset()
        assert config.backup_path == Path.home() / "vantage_backup.xml"
        assert not config.has_credentials
        assert not config.debug

    def test_host_name_allowed(self):
        assert ControllerConfig(host="vantage.local").host == "vantage.local"

    @pytest.mark.parametrize("host", ["", "   ", "192.168.1", "192.168.1.300", "10.0.0.1 x"])
    def test_invalid_host(self, host):
        with pytest.raises(ValidationError):
            ControllerConfig(host=host)

    def test_credentials(self):
        config = ControllerConfig(host="10.0.0.2", username="admin", password="secret")
        assert config.has_credentials

    @pytest.mark.parametrize(
        "credentials",
        [{"username": "admin"}, {"password": "secret"}, {"username": "admin", "password": ""}],
    )
    def test_credentials_both_or_neither(self, credentials):
        with pytest.raises(ValidationError):
            ControllerConfig(host="10.0.0.2", **credentials)

    def test_blank_credentials_are_absent(self):
        config = ControllerConfig(host="10.0.0.2", username=" ", password="")
        assert config.username is None
        assert not config.has_credentials

    def test_omit_string(self):
        config = ControllerConfig(host="10.0.0.2", omit="12, 34,,56")
        assert config.omit == frozenset({"12", "34", "56"})

    def test_omit_must_be_numeric(self):
        with pytest.raises(ValidationError):
            ControllerConfig(host="10.0.0.2", omit="12,abc")

    def test_range_string(self):
        config = ControllerConfig(host="10.0.0.2", vid_range="100, 200")
        assert config.vid_range == (100, 200)

    @pytest.mark.parametrize("vid_range", ["100", "1,2,3", "a,b", "200,100", "5,5"])
    def test_invalid_range(self, vid_range):
        with pytest.raises(ValidationError):
            ControllerConfig(host="10.0.0.2", vid_range=vid_range)

    def test_device_filter(self):
        config = ControllerConfig(host="10.0.0.2", omit="56", vid_range="50,60")
        assert config.device_filter() == DeviceFilter(
            omit=frozenset({"56"}),
            vid_min=50,
            vid_max=60,
        )

    def test_frozen(self):
        config = ControllerConfig(host="10.0.0.2")
        with pytest.raises(ValidationError):
            config.host = "10.0.0.3"

    def test_repr_hides_password(self):
        config = ControllerConfig(host="10.0.0.2", username="admin", password="secret")
        assert "secret" not in repr(config)


class TestFromMapping:
    """Tests for platform-style settings."""

    def test_platform_keys(self):
        config = ControllerConfig.from_mapping(
            {
                "platform": "VantageControls",
                "ipaddress": "192.168.1.100",
                "omit": "77,78",
                "range": "1,500",
                "debug": True,
            }
        )
        assert config.host == "192.168.1.100"
        assert config.omit == frozenset({"77", "78"})
        assert config.vid_range == (1, 500)
        assert config.debug

    def test_missing_address(self):
        with pytest.raises(ConfigurationError, match="ipaddress is required"):
            ControllerConfig.from_mapping({"username": "admin"})

    def test_validation_error_wrapped(self):
        with pytest.raises(ConfigurationError) as exc_info:
            ControllerConfig.from_mapping({"ipaddress": "192.168.1.100", "username": "admin"})
        assert isinstance(exc_info.value.__cause__, ValidationError)
