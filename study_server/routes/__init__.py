"""Register all route modules on the FastAPI app."""

from fastapi import FastAPI

from .cases import router as cases_router
from .facilities import router as facilities_router
from .readers import router as readers_router
from .root import router as root_router
from .sessions import router as sessions_router


def register_routes(app: FastAPI) -> None:
    """Attach all API routers to the app."""
    app.include_router(root_router)
    app.include_router(facilities_router, prefix="/api/facilities", tags=["facilities"])
    app.include_router(readers_router, prefix="/api/readers", tags=["readers"])
    app.include_router(sessions_router, prefix="/api/sessions", tags=["sessions"])
    app.include_router(cases_router, prefix="/api/cases", tags=["cases"])
