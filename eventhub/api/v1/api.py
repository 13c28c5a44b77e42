"""
Main API Router
Aggregates all API endpoints for v1
"""

from fastapi import APIRouter
from eventhub.api.v1.endpoints import (
    auth,
    users,
    events,
    venues,
    bookings,
    payment,
    tickets,
    organizer,
    admin,
    health
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(events.router, prefix="/events", tags=["events"])
api_router.include_router(venues.router, prefix="/venues", tags=["venues"])
api_router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
api_router.include_router(payment.router, prefix="/payments", tags=["payments"])
api_router.include_router(tickets.router, prefix="/tickets", tags=["tickets"])
api_router.include_router(organizer.router, prefix="/organizer", tags=["organizer"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
api_router.include_router(health.router, prefix="/health", tags=["health"])
