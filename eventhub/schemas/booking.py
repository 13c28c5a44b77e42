"""
Booking schemas
"""

from pydantic import Field, field_validator
from typing import List, Optional
from uuid import UUID
from datetime import datetime
from decimal import Decimal

from eventhub.schemas.base import BaseSchema, IDSchema
from eventhub.schemas.event import EventVenue
from eventhub.schemas.ticket import TicketResponse
from eventhub.models.booking import BookingStatus
from eventhub.models.payment import PaymentMethod, PaymentStatus
from eventhub.config import settings


class BookingCreate(BaseSchema):
    """Booking creation schema"""
    event_id: UUID
    quantity: int = Field(..., ge=1, le=settings.MAX_TICKETS_PER_BOOKING)
    discount_code: Optional[str] = Field(None, min_length=1, max_length=20)

    @field_validator('discount_code')
    @classmethod
    def normalize_discount_code(cls, v):
        if v is None:
            return v
        v = v.strip().upper()
        return v or None


class BookingEventInfo(BaseSchema):
    """Event summary embedded in a booking"""
    id: UUID
    title: str
    starts_at: datetime
    ticket_price: Decimal
    venue: EventVenue


class BookingPaymentInfo(BaseSchema):
    """Payment summary embedded in a booking"""
    id: UUID
    amount: Decimal
    payment_method: PaymentMethod
    status: PaymentStatus
    transaction_id: Optional[str] = None
    paid_at: datetime


class BookingResponse(IDSchema):
    """Booking response schema"""
    booking_reference: str
    customer_id: UUID
    event: BookingEventInfo
    quantity: int
    total_amount: Decimal
    status: BookingStatus
    booked_at: datetime
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None


class BookingDetail(BookingResponse):
    """Booking with payment and issued tickets"""
    payment: Optional[BookingPaymentInfo] = None
    tickets: List[TicketResponse] = []


class BookingCancelResponse(BaseSchema):
    """Booking cancellation response schema"""
    success: bool = True
    message: str
    booking_id: UUID
    status: BookingStatus
    released_tickets: int


class CustomerDashboard(BaseSchema):
    """Loyalty balance, purchase totals and latest bookings of a customer"""
    full_name: str
    loyalty_points: int
    upcoming_events: int
    tickets_purchased: int
    total_spent: Decimal
    recent_bookings: List[BookingResponse]
