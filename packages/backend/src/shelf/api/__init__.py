"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter, so the guard runs before body parsing and
before any handler on every protected route. Handlers that need the
caller also declare Depends(get_current_user); FastAPI caches it per
request so the token is only verified once. Health and auth routers
are open (no auth required).
"""

from fastapi import APIRouter, Depends

from shelf.api.auth import router as auth_router
from shelf.api.bookmarks import router as bookmarks_router
from shelf.api.health import router as health_router
from shelf.api.users import router as users_router
from shelf.auth.dependencies import get_current_user

# All protected routers require authentication
_auth = [Depends(get_current_user)]

api_router = APIRouter()

# Open routes: no auth required
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes: require a valid Bearer token
api_router.include_router(users_router, tags=["users"], dependencies=_auth)
api_router.include_router(bookmarks_router, tags=["bookmarks"], dependencies=_auth)
