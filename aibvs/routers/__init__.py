"""API routers for the AIBVS console backend."""
from fastapi import APIRouter

from . import alerts, auth, health, incidents, logs, scenarios, systems, users


def get_api_router() -> APIRouter:
    """Return the root API router."""

    api_router = APIRouter(prefix="/api")
    api_router.include_router(health.router)
    api_router.include_router(auth.router)
    api_router.include_router(users.router)
    api_router.include_router(systems.router)
    api_router.include_router(scenarios.router)
    api_router.include_router(incidents.router)
    api_router.include_router(logs.router)
    api_router.include_router(alerts.router)
    return api_router
