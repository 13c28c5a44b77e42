"""
Payment Service
Checkout quotes, payment processing and payment history for bookings
"""

import logging
import math
import uuid
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional
from uuid import UUID

from sqlalchemy import select, update, func, or_, case
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from eventhub.config import settings
from eventhub.core.database import db_manager
from eventhub.core.exceptions import (
    BookingStateError,
    EventHubException,
    NotFoundError,
    PaymentError,
)
from eventhub.core.metrics import PAYMENTS_COMPLETED, PAYMENTS_FAILED, TICKETS_ISSUED
from eventhub.core.security import AuthContext
from eventhub.models.base import utcnow
from eventhub.models.booking import Booking, BookingStatus
from eventhub.models.event import Event
from eventhub.models.payment import Payment, PaymentMethod, PaymentStatus
from eventhub.services.booking_service import booking_service
from eventhub.services.ticket_service import ticket_service
from eventhub.services.user_service import user_service

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")

HISTORY_WINDOWS = {
    "today": timedelta(days=1),
    "week": timedelta(weeks=1),
    "month": timedelta(days=30),
    "year": timedelta(days=365),
}

_bookings = Booking.__table__


class PaymentService:
    """Service for handling payment operations"""

    @staticmethod
    def amount_due(total: Decimal) -> Decimal:
        """Booking total plus the service fee, rounded to cents"""
        return (Decimal(total) * (1 + settings.SERVICE_FEE_RATE)).quantize(CENTS, rounding=ROUND_HALF_UP)

    @staticmethod
    def generate_transaction_id() -> str:
        return f"TXN{utcnow():%Y%m%d%H%M%S}{uuid.uuid4().hex[:8].upper()}"

    def _ensure_pending(self, booking: Booking) -> None:
        if booking.status != BookingStatus.PENDING:
            raise BookingStateError(
                "Booking is not awaiting payment",
                booking_id=booking.id,
                status=BookingStatus(booking.status).value
            )

    async def get_checkout(self, db: AsyncSession, ctx: AuthContext, booking_id: UUID) -> Dict:
        """Quote the amount due for a pending booking"""
        booking = await booking_service.get_booking(db, ctx, booking_id)
        self._ensure_pending(booking)

        due = self.amount_due(booking.total_amount)
        customer = await user_service.get_user(db, booking.customer_id)
        return {
            "booking_id": booking.id,
            "booking_reference": booking.booking_reference,
            "event_title": booking.event.title,
            "quantity": booking.quantity,
            "ticket_price": booking.event.ticket_price,
            "subtotal": booking.total_amount,
            "service_fee": due - Decimal(booking.total_amount),
            "amount_due": due,
            "currency": settings.CURRENCY,
            "available_loyalty_points": customer.loyalty_points,
            "points_to_earn": user_service.loyalty_points_for(due),
        }

    async def process_payment(
        self,
        db: AsyncSession,
        ctx: AuthContext,
        booking_id: UUID,
        payment_method: PaymentMethod,
        amount: Decimal
    ) -> Dict:
        """
        Pay for a pending booking.

        In one transaction: records a completed payment, moves the booking
        from pending to confirmed, issues one ticket per booked unit and
        credits the customer's loyalty points. Any failure rolls all of it
        back. The confirm step is a conditional update, so a second payment
        racing for the same booking fails with BookingStateError.
        """
        try:
            async with db_manager.transaction(db):
                booking = await booking_service.get_booking(db, ctx, booking_id)
                self._ensure_pending(booking)

                due = self.amount_due(booking.total_amount)
                if Decimal(amount).quantize(CENTS) != due:
                    raise PaymentError(
                        "Payment amount does not match the amount due",
                        {"amount_due": str(due), "amount": str(amount)}
                    )

                now = utcnow()
                result = await db.execute(
                    update(_bookings)
                    .where(
                        _bookings.c.id == booking.id,
                        _bookings.c.status == BookingStatus.PENDING
                    )
                    .values(status=BookingStatus.CONFIRMED, confirmed_at=now, updated_at=now)
                )
                await db.refresh(booking, ["status", "confirmed_at", "updated_at"])
                if result.rowcount != 1:
                    raise BookingStateError(
                        "Booking has already been processed",
                        booking_id=booking.id,
                        status=BookingStatus(booking.status).value
                    )

                payment = Payment(
                    booking_id=booking.id,
                    amount=due,
                    currency=settings.CURRENCY,
                    status=PaymentStatus.COMPLETED,
                    payment_method=PaymentMethod(payment_method),
                    transaction_id=self.generate_transaction_id(),
                    details=f"{booking.quantity} x {booking.event.title}",
                    paid_at=now,
                )
                booking.payment = payment

                tickets = ticket_service.issue_tickets(booking, issued_at=now)

                points = user_service.loyalty_points_for(due)
                await user_service.credit_loyalty_points(db, booking.customer_id, points)
                await db.flush()
        except EventHubException as e:
            PAYMENTS_FAILED.labels(reason=e.code).inc()
            logger.warning(f"Payment for booking {booking_id} rejected: {e.code} {e.message}")
            raise

        PAYMENTS_COMPLETED.inc()
        TICKETS_ISSUED.inc(len(tickets))
        logger.info(
            f"Payment {payment.transaction_id} completed for booking {booking.booking_reference}: "
            f"{due} {settings.CURRENCY}, {len(tickets)} tickets, {points} loyalty points"
        )

        return {
            "payment": payment,
            "booking_id": booking.id,
            "booking_reference": booking.booking_reference,
            "event_title": booking.event.title,
            "ticket_count": len(tickets),
            "loyalty_points_earned": points,
            "tickets": tickets,
        }

    async def get_payment(self, db: AsyncSession, ctx: AuthContext, payment_id: UUID) -> Payment:
        stmt = (
            select(Payment)
            .options(
                selectinload(Payment.booking).selectinload(Booking.event).selectinload(Event.venue),
                selectinload(Payment.booking).selectinload(Booking.customer),
            )
            .where(Payment.id == payment_id)
            .execution_options(populate_existing=True)
        )
        payment = (await db.execute(stmt)).scalar_one_or_none()
        if not payment or (not ctx.is_admin and payment.booking.customer_id != ctx.user_id):
            raise NotFoundError("Payment", payment_id)
        return payment

    async def payment_history(
        self,
        db: AsyncSession,
        ctx: AuthContext,
        search: Optional[str] = None,
        date_filter: Optional[str] = None,
        page: int = 1,
        per_page: int = 10
    ) -> Dict:
        """The caller's payments, newest first, with summary totals"""
        filters = [Booking.customer_id == ctx.user_id]
        if search:
            filters.append(
                or_(
                    Event.title.ilike(f"%{search}%"),
                    Booking.booking_reference.ilike(f"%{search}%")
                )
            )
        window = HISTORY_WINDOWS.get(date_filter or "")
        if window:
            filters.append(Payment.paid_at >= utcnow() - window)

        joined = (
            select(Payment)
            .join(Booking, Payment.booking_id == Booking.id)
            .join(Event, Booking.event_id == Event.id)
            .where(*filters)
        )

        totals = (await db.execute(
            select(
                func.count(Payment.id),
                func.coalesce(func.sum(case((Payment.status == PaymentStatus.COMPLETED, 1), else_=0)), 0),
                func.coalesce(func.sum(case((Payment.status == PaymentStatus.FAILED, 1), else_=0)), 0),
                func.coalesce(func.sum(case((Payment.status == PaymentStatus.COMPLETED, Payment.amount), else_=0)), 0),
            )
            .select_from(Payment)
            .join(Booking, Payment.booking_id == Booking.id)
            .join(Event, Booking.event_id == Event.id)
            .where(*filters)
        )).one()
        total_payments, successful, failed, amount_paid = totals

        rows = await db.execute(
            joined
            .add_columns(Booking.booking_reference, Event.title, Event.starts_at)
            .order_by(Payment.paid_at.desc(), Payment.id)
            .offset((page - 1) * per_page)
            .limit(per_page)
        )
        payments = [
            {
                "id": payment.id,
                "booking_id": payment.booking_id,
                "booking_reference": reference,
                "event_title": title,
                "event_starts_at": starts_at,
                "amount": payment.amount,
                "payment_method": payment.payment_method,
                "status": payment.status,
                "paid_at": payment.paid_at,
            }
            for payment, reference, title, starts_at in rows.all()
        ]

        return {
            "payments": payments,
            "total_payments": total_payments,
            "successful_payments": successful,
            "failed_payments": failed,
            "total_amount_paid": Decimal(str(amount_paid)).quantize(CENTS),
            "page": page,
            "total_pages": math.ceil(total_payments / per_page) if per_page else 0,
        }

    def receipt_text(self, payment: Payment) -> str:
        """Plain-text receipt for a payment"""
        booking = payment.booking
        event = booking.event
        subtotal = Decimal(booking.total_amount)
        lines = [
            "EventHub - Payment Receipt",
            "=" * 40,
            f"Transaction:  {payment.transaction_id}",
            f"Date:         {payment.paid_at:%Y-%m-%d %H:%M} UTC",
            f"Customer:     {booking.customer.full_name} <{booking.customer.email}>",
            f"Booking:      {booking.booking_reference}",
            "",
            f"Event:        {event.title}",
            f"When:         {event.starts_at:%Y-%m-%d %H:%M}",
            f"Venue:        {event.venue.name}, {event.venue.location}",
            f"Tickets:      {booking.quantity} x {Decimal(event.ticket_price):.2f}",
            "",
            f"Subtotal:     {subtotal:.2f}",
            f"Service fee:  {Decimal(payment.amount) - subtotal:.2f}",
            f"Total paid:   {Decimal(payment.amount):.2f} {payment.currency}",
            f"Method:       {PaymentMethod(payment.payment_method).value.replace('_', ' ').title()}",
            f"Status:       {PaymentStatus(payment.status).value.upper()}",
            "=" * 40,
        ]
        return "\n".join(lines) + "\n"


payment_service = PaymentService()
