# goes_browser/services/channel_service.py
"""
Channel Service - read-only channel metadata lookups.

The channel map is a JSON object keyed by channel identifier:

    {"ABI-Band02": {"shortname": "Red", "description": "Visible red band..."}}

Each (re)load builds a fresh immutable snapshot and swaps it in whole, so a
lookup never sees a half-loaded table. A failed reload keeps the previous
snapshot.
"""

import json
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from ..constants import (
    DESCRIPTION_NOT_AVAILABLE,
    ENHANCED_CHANNEL_SUFFIX,
    ENHANCED_DESCRIPTION_NOTE,
    ENHANCED_SHORTNAME_NOTE,
    SHORTNAME_NOT_AVAILABLE,
)
from ..enums import LogEmoji, LoggerName, LogSource
from ..exceptions import ConfigurationError
from ..models.channel_model import ChannelRecord
from .logger import get_service_logger

logger = get_service_logger(LoggerName.CHANNEL_SERVICE, LogSource.SYSTEM)


def parse_channel_map(raw: Any) -> Mapping[str, ChannelRecord]:
    """
    Validate decoded JSON and build an immutable channel table.

    Raises:
        ConfigurationError: If the document is not an object of channel records
    """
    if not isinstance(raw, dict):
        raise ConfigurationError("Channel map must be a JSON object")

    try:
        table = {
            str(channel): ChannelRecord.model_validate(record)
            for channel, record in raw.items()
        }
    except ValidationError as e:
        raise ConfigurationError(f"Invalid channel record: {e}") from e

    return MappingProxyType(table)


def split_enhanced(channel: str) -> Tuple[str, bool]:
    """Strip the enhanced marker from a channel id; report whether it was there."""
    if ENHANCED_CHANNEL_SUFFIX in channel:
        return channel.replace(ENHANCED_CHANNEL_SUFFIX, "", 1), True
    return channel, False


class ChannelService:
    """Lookup of channel short names and descriptions."""

    def __init__(self, channel_map_file: Union[str, Path]):
        self.channel_map_file = Path(channel_map_file)
        self._channels: Mapping[str, ChannelRecord] = MappingProxyType({})

    @property
    def channels(self) -> Mapping[str, ChannelRecord]:
        return self._channels

    def load(self) -> int:
        """
        Read the channel map file and replace the current snapshot.

        Returns:
            Number of channels loaded

        Raises:
            ConfigurationError: If the file is missing, not JSON or malformed
        """
        try:
            raw = json.loads(self.channel_map_file.read_text(encoding="utf-8"))
        except OSError as e:
            raise ConfigurationError(
                f"Cannot read channel map {self.channel_map_file}: {e}"
            ) from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Channel map {self.channel_map_file} is not valid JSON: {e}"
            ) from e

        self._channels = parse_channel_map(raw)
        return len(self._channels)

    def reload(self) -> bool:
        """
        Reload the channel map, keeping the previous table on failure.

        Returns:
            True if a new table was swapped in
        """
        try:
            count = self.load()
        except ConfigurationError as e:
            logger.error(
                "Error reloading channel map, keeping previous table",
                exception=e,
                error_context={"channel_map_file": str(self.channel_map_file)},
            )
            return False

        logger.info(
            f"Channel map reloaded successfully ({count} channels)",
            emoji=LogEmoji.RELOAD,
        )
        return True

    def get_description(self, channel: str) -> Optional[str]:
        """
        Description for a channel id, or None if the channel is unknown.

        Enhanced channel ids are looked up without the marker and get an
        explanatory note appended.
        """
        base_channel, enhanced = split_enhanced(channel)
        record = self._channels.get(base_channel)
        if record is None:
            return None

        description = record.description or DESCRIPTION_NOT_AVAILABLE
        if enhanced:
            description += ENHANCED_DESCRIPTION_NOTE
        return description

    def get_shortname(self, channel: str) -> Optional[str]:
        """Short name for a channel id, or None if the channel is unknown."""
        base_channel, enhanced = split_enhanced(channel)
        record = self._channels.get(base_channel)
        if record is None:
            return None

        shortname = record.shortname or SHORTNAME_NOT_AVAILABLE
        if enhanced:
            shortname += ENHANCED_SHORTNAME_NOTE
        return shortname
