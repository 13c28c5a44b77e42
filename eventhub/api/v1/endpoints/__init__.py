"""
API endpoints module
"""

from . import auth, users, events, venues, bookings, payment, tickets, organizer, admin, health

__all__ = [
    "auth",
    "users",
    "events",
    "venues",
    "bookings",
    "payment",
    "tickets",
    "organizer",
    "admin",
    "health"
]
