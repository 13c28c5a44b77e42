"""
Database models
"""

from eventhub.models.user import User, UserRole
from eventhub.models.venue import Venue
from eventhub.models.event import Event
from eventhub.models.booking import Booking, BookingDiscount, BookingStatus
from eventhub.models.payment import Payment, PaymentStatus, PaymentMethod
from eventhub.models.ticket import Ticket, TicketStatus
from eventhub.models.discount import Discount

__all__ = [
    "User",
    "UserRole",
    "Venue",
    "Event",
    "Booking",
    "BookingDiscount",
    "BookingStatus",
    "Payment",
    "PaymentStatus",
    "PaymentMethod",
    "Ticket",
    "TicketStatus",
    "Discount"
]
