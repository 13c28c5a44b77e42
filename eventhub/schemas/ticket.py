"""
Ticket schemas
"""

from pydantic import Field
from typing import Optional
from uuid import UUID
from datetime import datetime

from eventhub.schemas.base import BaseSchema, IDSchema
from eventhub.models.ticket import TicketStatus


class TicketResponse(IDSchema):
    """Ticket as shown to its owner"""
    booking_id: UUID
    ticket_number: str
    qr_payload: str
    status: TicketStatus
    seat_number: Optional[str] = None
    issued_at: datetime
    used_at: Optional[datetime] = None


class MyTicketResponse(TicketResponse):
    """Ticket with the event context used on the customer's ticket list"""
    booking_reference: str
    event_id: UUID
    event_title: str
    event_starts_at: datetime
    venue_name: str


class TicketVerifyRequest(BaseSchema):
    """Scanned QR payload"""
    payload: str = Field(..., min_length=1, max_length=500)
    check_in: bool = True


class TicketVerifyResponse(BaseSchema):
    """Outcome of a door scan"""
    valid: bool
    result: str
    message: str
    ticket_id: Optional[UUID] = None
    ticket_number: Optional[str] = None
    ticket_status: Optional[TicketStatus] = None
    event_id: Optional[UUID] = None
    used_at: Optional[datetime] = None


class TicketQRImage(BaseSchema):
    """QR code for embedding in JSON clients"""
    ticket_id: UUID
    ticket_number: str
    qr_payload: str
    media_type: str = "image/png"
    image_base64: str
