from lockerscope.api.health import router as health_router
from lockerscope.api.locker import router as locker_router

__all__ = [
    "health_router",
    "locker_router",
]
