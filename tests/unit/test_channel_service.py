#!/usr/bin/env python3
"""
Unit tests for ChannelService.
"""

import json

import pytest

from goes_browser.constants import (
    DESCRIPTION_NOT_AVAILABLE,
    ENHANCED_DESCRIPTION_NOTE,
    ENHANCED_SHORTNAME_NOTE,
    SHORTNAME_NOT_AVAILABLE,
)
from goes_browser.exceptions import ConfigurationError
from goes_browser.services.channel_service import (
    ChannelService,
    parse_channel_map,
    split_enhanced,
)

CHANNEL_MAP = {
    "ABI-Band02": {"shortname": "Red", "description": "Visible red band."},
    "ABI-Band13": {"description": "Clean longwave infrared window."},
    "GEOCOLOR": {"shortname": "GeoColor"},
}


@pytest.mark.unit
class TestChannelService:
    """Test suite for channel metadata lookups."""

    @pytest.fixture
    def map_file(self, tmp_path):
        path = tmp_path / "goes16.map.json"
        path.write_text(json.dumps(CHANNEL_MAP))
        return path

    @pytest.fixture
    def service(self, map_file):
        service = ChannelService(map_file)
        service.load()
        return service

    def test_load_counts_channels(self, map_file):
        """Test load() returns the number of channels."""
        assert ChannelService(map_file).load() == 3

    def test_empty_before_load(self, map_file):
        """Test lookups return None until a map is loaded."""
        service = ChannelService(map_file)
        assert service.get_description("ABI-Band02") is None
        assert service.get_shortname("ABI-Band02") is None

    def test_plain_lookups(self, service):
        """Test description and short name of a known channel."""
        assert service.get_description("ABI-Band02") == "Visible red band."
        assert service.get_shortname("ABI-Band02") == "Red"

    def test_missing_fields_fall_back(self, service):
        """Test records lacking a field answer with the placeholder text."""
        assert service.get_shortname("ABI-Band13") == SHORTNAME_NOT_AVAILABLE
        assert service.get_description("GEOCOLOR") == DESCRIPTION_NOT_AVAILABLE

    def test_enhanced_channel(self, service):
        """Test enhanced ids resolve to the base channel plus a note."""
        assert (
            service.get_description("ABI-Band02_enhanced")
            == "Visible red band." + ENHANCED_DESCRIPTION_NOTE
        )
        assert service.get_shortname("ABI-Band02_enhanced") == "Red" + ENHANCED_SHORTNAME_NOTE

    def test_unknown_channel(self, service):
        """Test unknown channels, enhanced or not, return None."""
        assert service.get_description("ABI-Band99") is None
        assert service.get_shortname("ABI-Band99_enhanced") is None

    def test_lookup_is_case_sensitive(self, service):
        """Test channel ids are matched exactly."""
        assert service.get_shortname("abi-band02") is None

    def test_split_enhanced(self):
        """Test the enhanced marker is removed once."""
        assert split_enhanced("GEOCOLOR") == ("GEOCOLOR", False)
        assert split_enhanced("GEOCOLOR_enhanced") == ("GEOCOLOR", True)

    def test_missing_file_raises(self, tmp_path):
        """Test a missing map file raises ConfigurationError."""
        with pytest.raises(ConfigurationError):
            ChannelService(tmp_path / "missing.json").load()

    @pytest.mark.parametrize(
        "content",
        ["{not json", "[1, 2, 3]", '{"ABI-Band02": "just a string"}'],
    )
    def test_malformed_map_raises(self, tmp_path, content):
        """Test bad JSON and bad records raise ConfigurationError."""
        path = tmp_path / "bad.json"
        path.write_text(content)
        with pytest.raises(ConfigurationError):
            ChannelService(path).load()

    def test_reload_swaps_table(self, service, map_file):
        """Test a successful reload replaces the whole table."""
        map_file.write_text(json.dumps({"ABI-Band07": {"shortname": "Shortwave"}}))

        assert service.reload() is True
        assert service.get_shortname("ABI-Band07") == "Shortwave"
        assert service.get_shortname("ABI-Band02") is None

    def test_failed_reload_keeps_previous_table(self, service, map_file):
        """Test a broken file on reload leaves the old table in place."""
        previous = service.channels
        map_file.write_text("{truncated")

        assert service.reload() is False
        assert service.channels is previous
        assert service.get_shortname("ABI-Band02") == "Red"

    def test_table_is_read_only(self, service):
        """Test the published table cannot be mutated."""
        with pytest.raises(TypeError):
            service.channels["ABI-Band02"] = None

    def test_parse_channel_map_rejects_non_object(self):
        with pytest.raises(ConfigurationError):
            parse_channel_map(["ABI-Band02"])
