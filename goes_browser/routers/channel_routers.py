# goes_browser/routers/channel_routers.py
"""
Channel metadata HTTP endpoints.

Unknown channels answer 204 No Content.
"""

from typing import Union

from fastapi import APIRouter, Query, Response, status

from ..dependencies import ChannelServiceDep
from ..models.channel_model import ChannelDescriptionResponse, ChannelShortnameResponse
from ..utils.router_helpers import handle_exceptions

router = APIRouter(tags=["channels"])


@router.get("/description", response_model=ChannelDescriptionResponse)
@handle_exceptions("fetch channel description")
async def get_channel_description(
    channel_service: ChannelServiceDep,
    channel: str = Query(..., description="Channel identifier, optionally *_enhanced"),
) -> Union[ChannelDescriptionResponse, Response]:
    description = channel_service.get_description(channel)
    if description is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return ChannelDescriptionResponse(description=description)


@router.get("/shortname", response_model=ChannelShortnameResponse)
@handle_exceptions("fetch channel shortname")
async def get_channel_shortname(
    channel_service: ChannelServiceDep,
    channel: str = Query(..., description="Channel identifier, optionally *_enhanced"),
) -> Union[ChannelShortnameResponse, Response]:
    shortname = channel_service.get_shortname(channel)
    if shortname is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return ChannelShortnameResponse(shortname=shortname)
