from .auth import router as auth_router
from .profile import router as profile_router
from .settings import router as settings_router
from .sessions import router as sessions_router
from .stats import router as stats_router

__all__ = ["auth_router", "profile_router", "settings_router", "sessions_router", "stats_router"]
