"""
Payment schemas for request/response models
"""

from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from pydantic import Field
from uuid import UUID

from eventhub.schemas.base import BaseSchema, IDSchema
from eventhub.schemas.ticket import TicketResponse
from eventhub.models.payment import PaymentMethod, PaymentStatus


class CheckoutResponse(BaseSchema):
    """Amount quote for a pending booking"""
    booking_id: UUID
    booking_reference: str
    event_title: str
    quantity: int
    ticket_price: Decimal
    subtotal: Decimal
    service_fee: Decimal
    amount_due: Decimal
    currency: str
    available_loyalty_points: int
    points_to_earn: int


class PaymentCreate(BaseSchema):
    booking_id: UUID
    payment_method: PaymentMethod = PaymentMethod.CREDIT_CARD
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)


class PaymentResponse(IDSchema):
    booking_id: UUID
    amount: Decimal
    currency: str
    status: PaymentStatus
    payment_method: PaymentMethod
    transaction_id: Optional[str] = None
    paid_at: datetime


class PaymentSuccessResponse(BaseSchema):
    """Confirmation returned once a booking is paid"""
    payment: PaymentResponse
    booking_id: UUID
    booking_reference: str
    event_title: str
    ticket_count: int
    loyalty_points_earned: int
    tickets: List[TicketResponse]


class PaymentHistoryItem(BaseSchema):
    id: UUID
    booking_id: UUID
    booking_reference: str
    event_title: str
    event_starts_at: datetime
    amount: Decimal
    payment_method: PaymentMethod
    status: PaymentStatus
    paid_at: datetime


class PaymentHistoryResponse(BaseSchema):
    payments: List[PaymentHistoryItem]
    total_payments: int
    successful_payments: int
    failed_payments: int
    total_amount_paid: Decimal
    page: int
    total_pages: int
