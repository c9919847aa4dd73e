from . import browse_routers, channel_routers, health_routers, thumbnail_routers

__all__ = [
    "browse_routers",
    "channel_routers",
    "health_routers",
    "thumbnail_routers",
]
