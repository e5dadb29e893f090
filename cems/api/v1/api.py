# cems/api/v1/api.py

from fastapi import APIRouter
from cems.api.v1.endpoints import (
    admin,
    events,
    health,
    notifications,
    registrations,
    users,
    venues,
)

# This is the main router for the v1 API.
# It will include all the specific endpoint routers.
api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(registrations.router)
api_router.include_router(events.router)
api_router.include_router(venues.router)
api_router.include_router(notifications.router)
api_router.include_router(users.router)
api_router.include_router(admin.router)
