"""
Pydantic schemas for request and response validation
"""

from eventhub.schemas.user import (
    UserCreate,
    UserUpdate,
    UserResponse,
    Token
)
from eventhub.schemas.event import (
    EventCreate,
    EventUpdate,
    EventResponse
)
from eventhub.schemas.booking import (
    BookingCreate,
    BookingResponse,
    BookingDetail
)
from eventhub.schemas.payment import (
    PaymentCreate,
    PaymentResponse
)
from eventhub.schemas.ticket import TicketResponse
from eventhub.schemas.response import (
    ErrorResponse,
    PaginatedResponse,
    MessageResponse
)

__all__ = [
    "UserCreate",
    "UserUpdate",
    "UserResponse",
    "Token",
    "EventCreate",
    "EventUpdate",
    "EventResponse",
    "BookingCreate",
    "BookingResponse",
    "BookingDetail",
    "PaymentCreate",
    "PaymentResponse",
    "TicketResponse",
    "ErrorResponse",
    "PaginatedResponse",
    "MessageResponse"
]
