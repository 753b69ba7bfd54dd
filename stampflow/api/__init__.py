
from . import stamp

routers = [
    stamp.router,
]

__all__ = [
    "routers",
]
