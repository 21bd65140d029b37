"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter, so every notes route is gated even before its
own Depends(get_current_identity) runs. Health and auth routers are
open (login has to be reachable without a token).
"""

from fastapi import APIRouter, Depends

from notekeep.api.auth import router as auth_router
from notekeep.api.health import router as health_router
from notekeep.api.notes import router as notes_router
from notekeep.auth.dependencies import get_current_identity

# Protected routers require a valid bearer token
_auth = [Depends(get_current_identity)]

api_router = APIRouter(prefix="/api/v1")

# Open routes, no auth required
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes
api_router.include_router(notes_router, tags=["notes"], dependencies=_auth)
