"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter. This protects every movie route without
modifying individual handlers. Health and auth routers are open.
"""

from fastapi import APIRouter, Depends

from movieapi.api.auth import router as auth_router
from movieapi.api.health import router as health_router
from movieapi.api.movies import router as movies_router
from movieapi.auth.dependencies import get_current_user

# All protected routers require authentication
_auth = [Depends(get_current_user)]

api_router = APIRouter()

# Open routes: no auth required
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes: require a valid JWT
api_router.include_router(movies_router, tags=["movies"], dependencies=_auth)
