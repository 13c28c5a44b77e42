"""
Domain services
"""

from eventhub.services.booking_service import booking_service, BookingService
from eventhub.services.discount_service import discount_service, DiscountService
from eventhub.services.event_service import event_service, EventService
from eventhub.services.payment_service import payment_service, PaymentService
from eventhub.services.qr_code_service import qr_code_service, QRCodeService, QRPayload
from eventhub.services.ticket_service import ticket_service, TicketService
from eventhub.services.user_service import user_service, UserService
from eventhub.services.venue_service import venue_service, VenueService

__all__ = [
    "booking_service",
    "BookingService",
    "discount_service",
    "DiscountService",
    "event_service",
    "EventService",
    "payment_service",
    "PaymentService",
    "qr_code_service",
    "QRCodeService",
    "QRPayload",
    "ticket_service",
    "TicketService",
    "user_service",
    "UserService",
    "venue_service",
    "VenueService",
]
