# goes_browser/models/channel_model.py
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ChannelRecord(BaseModel):
    """Channel metadata entry from the channel map file"""

    shortname: Optional[str] = None
    description: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="ignore")


class ChannelDescriptionResponse(BaseModel):
    description: str


class ChannelShortnameResponse(BaseModel):
    shortname: str
