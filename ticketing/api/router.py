"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from ticketing.api.routes import auth, events, admission, community

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth.router)
# Static /events/* paths before the /events/{event_id} routes
api_router.include_router(admission.router)
api_router.include_router(community.router)
api_router.include_router(events.router)
api_router.include_router(admission.tickets_router)
