"""
Booking Service
Ticket reservation, cancellation and booking queries
"""

import logging
import random
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select, update, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from eventhub.config import settings
from eventhub.core.database import db_manager
from eventhub.core.exceptions import (
    BookingStateError,
    EventHubException,
    InsufficientInventoryError,
    NotFoundError,
    ValidationError,
)
from eventhub.core.metrics import BOOKINGS_CANCELLED, BOOKINGS_CREATED, BOOKINGS_REJECTED
from eventhub.core.security import AuthContext
from eventhub.models.base import as_utc, utcnow
from eventhub.models.booking import Booking, BookingDiscount, BookingStatus
from eventhub.models.event import Event
from eventhub.models.payment import Payment, PaymentStatus
from eventhub.models.ticket import TicketStatus
from eventhub.services.discount_service import discount_service
from eventhub.services.event_service import event_service

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")

BOOKING_SORTS = {
    "date-asc": Booking.booked_at.asc(),
    "date-desc": Booking.booked_at.desc(),
    "amount-asc": Booking.total_amount.asc(),
    "amount-desc": Booking.total_amount.desc(),
}

_bookings = Booking.__table__


def _booking_options():
    return (
        selectinload(Booking.event).selectinload(Event.venue),
        selectinload(Booking.payment),
        selectinload(Booking.tickets),
        selectinload(Booking.discounts),
    )


class BookingService:

    @staticmethod
    def calculate_total_amount(
        ticket_price: Decimal,
        quantity: int,
        discount_percentage: Optional[Decimal] = None
    ) -> Decimal:
        """Price times quantity, less the discount percentage, in cents"""
        subtotal = Decimal(ticket_price) * quantity
        if discount_percentage:
            reduction = (subtotal * Decimal(discount_percentage) / Decimal(100)).quantize(CENTS, rounding=ROUND_HALF_UP)
            subtotal -= reduction
        return subtotal.quantize(CENTS, rounding=ROUND_HALF_UP)

    async def generate_booking_reference(self, db: AsyncSession) -> str:
        """BK + UTC timestamp + 4 random digits, unique across bookings"""
        while True:
            reference = f"BK{utcnow():%Y%m%d%H%M%S}{random.randint(0, 9999):04d}"
            exists = await db.scalar(
                select(Booking.id).where(Booking.booking_reference == reference)
            )
            if not exists:
                return reference

    async def create_booking(
        self,
        db: AsyncSession,
        ctx: AuthContext,
        event_id: UUID,
        quantity: int,
        discount_code: Optional[str] = None
    ) -> Booking:
        """
        Reserve quantity tickets for the caller as a pending booking.

        The event inventory is taken at this point, atomically. When not
        enough tickets remain nothing is written and the request fails with
        InsufficientInventoryError.
        """
        if quantity < 1 or quantity > settings.MAX_TICKETS_PER_BOOKING:
            raise ValidationError(
                f"Quantity must be between 1 and {settings.MAX_TICKETS_PER_BOOKING}",
                field="quantity"
            )

        try:
            async with db_manager.transaction(db):
                event = await event_service.get_event(db, event_id)
                if as_utc(event.starts_at) < utcnow():
                    raise ValidationError("Event has already started", field="event_id")

                discount = None
                if discount_code:
                    discount = await discount_service.redeem(db, discount_code)

                subtotal = self.calculate_total_amount(event.ticket_price, quantity)
                total = self.calculate_total_amount(
                    event.ticket_price,
                    quantity,
                    discount.percentage if discount else None
                )

                if not await event_service.reserve_tickets(db, event, quantity):
                    raise InsufficientInventoryError(event.id, quantity, event.available_tickets)

                booking = Booking(
                    booking_reference=await self.generate_booking_reference(db),
                    customer_id=ctx.user_id,
                    event_id=event.id,
                    quantity=quantity,
                    total_amount=total,
                    status=BookingStatus.PENDING,
                    booked_at=utcnow(),
                )
                db.add(booking)
                await db.flush()

                if discount:
                    db.add(BookingDiscount(
                        booking_id=booking.id,
                        discount_id=discount.id,
                        discount_amount=subtotal - total,
                    ))
                    await db.flush()
        except EventHubException as e:
            BOOKINGS_REJECTED.labels(reason=e.code).inc()
            raise

        BOOKINGS_CREATED.inc()
        logger.info(
            f"Booking {booking.booking_reference} created: {quantity} tickets "
            f"for event {event_id} by {ctx.user_id}"
        )
        return await self.get_booking(db, ctx, booking.id)

    async def _load(self, db: AsyncSession, booking_id: UUID) -> Optional[Booking]:
        stmt = (
            select(Booking)
            .options(*_booking_options())
            .where(Booking.id == booking_id)
            .execution_options(populate_existing=True)
        )
        return (await db.execute(stmt)).scalar_one_or_none()

    async def get_booking(self, db: AsyncSession, ctx: AuthContext, booking_id: UUID) -> Booking:
        """A booking visible to the caller: their own, or any for admins"""
        booking = await self._load(db, booking_id)
        if not booking or (not ctx.is_admin and booking.customer_id != ctx.user_id):
            raise NotFoundError("Booking", booking_id)
        return booking

    async def cancel_booking(self, db: AsyncSession, ctx: AuthContext, booking_id: UUID) -> Booking:
        """
        Cancel a pending booking and give its tickets back to the event.
        Bookings in any other status are rejected.
        """
        async with db_manager.transaction(db):
            booking = await self.get_booking(db, ctx, booking_id)
            now = utcnow()

            result = await db.execute(
                update(_bookings)
                .where(
                    _bookings.c.id == booking.id,
                    _bookings.c.status == BookingStatus.PENDING
                )
                .values(status=BookingStatus.CANCELLED, cancelled_at=now, updated_at=now)
            )
            await db.refresh(booking, ["status", "cancelled_at", "updated_at"])
            if result.rowcount != 1:
                raise BookingStateError(
                    "Only pending bookings can be cancelled",
                    booking_id=booking.id,
                    status=BookingStatus(booking.status).value
                )

            await event_service.release_tickets(db, booking.event, booking.quantity)
            for ticket in booking.tickets:
                ticket.status = TicketStatus.CANCELLED

        BOOKINGS_CANCELLED.inc()
        logger.info(f"Booking {booking.booking_reference} cancelled by {ctx.user_id}, released {booking.quantity} tickets")
        return booking

    async def list_customer_bookings(
        self,
        db: AsyncSession,
        ctx: AuthContext,
        status: Optional[BookingStatus] = None,
        time_filter: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: str = "date-desc",
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[Booking], int]:
        filters = [Booking.customer_id == ctx.user_id]
        if status:
            filters.append(Booking.status == status)
        if time_filter == "upcoming":
            filters.append(Booking.event.has(Event.starts_at >= utcnow()))
        elif time_filter == "past":
            filters.append(Booking.event.has(Event.starts_at < utcnow()))
        if search:
            filters.append(
                or_(
                    Booking.booking_reference.ilike(f"%{search}%"),
                    Booking.event.has(Event.title.ilike(f"%{search}%"))
                )
            )

        total = (await db.execute(select(func.count(Booking.id)).where(*filters))).scalar_one()
        stmt = (
            select(Booking)
            .options(*_booking_options())
            .where(*filters)
            .order_by(BOOKING_SORTS.get(sort_by, Booking.booked_at.desc()), Booking.id)
            .offset(skip)
            .limit(limit)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all()), total

    async def list_event_bookings(
        self,
        db: AsyncSession,
        ctx: AuthContext,
        event_id: UUID,
        status: Optional[BookingStatus] = None
    ) -> List[Booking]:
        """Bookings of one event, for its organizer or an admin"""
        event = await event_service.get_event(db, event_id, include_inactive=True)
        event_service.ensure_can_manage(ctx, event)

        stmt = (
            select(Booking)
            .options(*_booking_options())
            .where(Booking.event_id == event.id)
            .order_by(Booking.booked_at.desc())
        )
        if status:
            stmt = stmt.where(Booking.status == status)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def get_customer_stats(self, db: AsyncSession, ctx: AuthContext, recent: int = 5) -> dict:
        """
        Figures for the customer dashboard. Only paid bookings (confirmed or
        completed) count towards tickets purchased and upcoming events.
        """
        paid = [
            Booking.customer_id == ctx.user_id,
            Booking.status.in_([BookingStatus.CONFIRMED, BookingStatus.COMPLETED]),
        ]

        tickets_purchased = (await db.execute(
            select(func.coalesce(func.sum(Booking.quantity), 0)).where(*paid)
        )).scalar_one()

        upcoming_events = (await db.execute(
            select(func.count(func.distinct(Booking.event_id)))
            .join(Event, Booking.event_id == Event.id)
            .where(*paid, Event.starts_at >= utcnow())
        )).scalar_one()

        total_spent = (await db.execute(
            select(func.coalesce(func.sum(Payment.amount), 0))
            .join(Booking, Payment.booking_id == Booking.id)
            .where(
                Booking.customer_id == ctx.user_id,
                Payment.status == PaymentStatus.COMPLETED
            )
        )).scalar_one()

        recent_bookings, _ = await self.list_customer_bookings(db, ctx, limit=recent)
        return {
            "upcoming_events": upcoming_events,
            "tickets_purchased": int(tickets_purchased),
            "total_spent": Decimal(str(total_spent)).quantize(CENTS),
            "recent_bookings": recent_bookings,
        }


booking_service = BookingService()
