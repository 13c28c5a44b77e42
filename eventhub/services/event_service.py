"""
Event Service
Event catalogue queries, organizer management and ticket inventory
"""

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select, update, func, or_, and_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from eventhub.core.database import db_manager
from eventhub.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from eventhub.core.security import AuthContext
from eventhub.models.base import as_utc, utcnow
from eventhub.models.booking import Booking, BookingStatus
from eventhub.models.event import Event
from eventhub.models.payment import Payment, PaymentStatus
from eventhub.models.venue import Venue
from eventhub.schemas.event import EventCreate, EventUpdate

logger = logging.getLogger(__name__)

EVENT_SORTS = {
    "date-asc": Event.starts_at.asc(),
    "date-desc": Event.starts_at.desc(),
    "price-asc": Event.ticket_price.asc(),
    "price-desc": Event.ticket_price.desc(),
    "title": Event.title.asc(),
}

_events = Event.__table__


class EventService:
    """Service for event catalogue and inventory operations"""

    async def list_events(
        self,
        db: AsyncSession,
        search: Optional[str] = None,
        category: Optional[str] = None,
        location: Optional[str] = None,
        on_date: Optional[datetime] = None,
        include_past: bool = False,
        sort_by: str = "date-asc",
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[Event], int]:
        """Active events with filtering, sorting and pagination"""
        filters = [Event.is_active.is_(True)]
        if not include_past:
            filters.append(Event.starts_at >= utcnow())
        if search:
            filters.append(
                or_(
                    Event.title.ilike(f"%{search}%"),
                    Event.description.ilike(f"%{search}%")
                )
            )
        if category:
            filters.append(func.lower(Event.category) == category.lower())
        if location:
            filters.append(Event.venue.has(Venue.location.ilike(f"%{location}%")))
        if on_date:
            day_start = as_utc(on_date).replace(hour=0, minute=0, second=0, microsecond=0)
            filters.append(and_(Event.starts_at >= day_start, Event.starts_at < day_start + timedelta(days=1)))

        count_stmt = select(func.count(Event.id)).where(*filters)
        total = (await db.execute(count_stmt)).scalar_one()

        stmt = (
            select(Event)
            .options(selectinload(Event.venue))
            .where(*filters)
            .order_by(EVENT_SORTS.get(sort_by, Event.starts_at.asc()), Event.id)
            .offset(skip)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all()), total

    async def list_categories(self, db: AsyncSession) -> List[str]:
        stmt = (
            select(Event.category)
            .where(Event.is_active.is_(True))
            .distinct()
            .order_by(Event.category)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def get_event(self, db: AsyncSession, event_id: UUID, include_inactive: bool = False) -> Event:
        stmt = (
            select(Event)
            .options(selectinload(Event.venue))
            .where(Event.id == event_id)
            .execution_options(populate_existing=True)
        )
        if not include_inactive:
            stmt = stmt.where(Event.is_active.is_(True))
        event = (await db.execute(stmt)).scalar_one_or_none()
        if not event:
            raise NotFoundError("Event", event_id)
        return event

    async def get_organizer_events(self, db: AsyncSession, ctx: AuthContext) -> List[Event]:
        stmt = (
            select(Event)
            .options(selectinload(Event.venue))
            .where(Event.organizer_id == ctx.user_id)
            .order_by(Event.starts_at.desc())
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    def ensure_can_manage(self, ctx: AuthContext, event: Event) -> None:
        if not ctx.is_admin and event.organizer_id != ctx.user_id:
            raise AuthorizationError("Only the event organizer can manage this event")

    async def create_event(self, db: AsyncSession, ctx: AuthContext, data: EventCreate) -> Event:
        """Create an event; the whole ticket allocation starts out available"""
        async with db_manager.transaction(db):
            venue = await db.get(Venue, data.venue_id)
            if not venue:
                raise NotFoundError("Venue", data.venue_id)
            if data.total_tickets > venue.capacity:
                raise ValidationError(
                    f"total_tickets exceeds venue capacity of {venue.capacity}",
                    field="total_tickets"
                )
            starts_at = as_utc(data.starts_at)
            if starts_at <= utcnow():
                raise ValidationError("Event must start in the future", field="starts_at")

            event = Event(
                title=data.title,
                description=data.description,
                category=data.category,
                starts_at=starts_at,
                ticket_price=data.ticket_price,
                total_tickets=data.total_tickets,
                available_tickets=data.total_tickets,
                image_url=data.image_url,
                is_active=True,
                venue_id=venue.id,
                organizer_id=ctx.user_id,
            )
            db.add(event)
            await db.flush()

        logger.info(f"Event created: {event.id} by {ctx.user_id}")
        return await self.get_event(db, event.id)

    async def update_event(self, db: AsyncSession, ctx: AuthContext, event_id: UUID, data: EventUpdate) -> Event:
        """
        Update event details. A new total_tickets moves available_tickets by
        the same delta and may not go below the tickets already reserved.
        """
        async with db_manager.transaction(db):
            event = await self.get_event(db, event_id, include_inactive=True)
            self.ensure_can_manage(ctx, event)

            changes = data.model_dump(exclude_unset=True)
            new_total = changes.pop("total_tickets", None)
            if changes.get("starts_at") is not None:
                changes["starts_at"] = as_utc(changes["starts_at"])
                if changes["starts_at"] <= utcnow():
                    raise ValidationError("Event must start in the future", field="starts_at")

            for field, value in changes.items():
                setattr(event, field, value)

            if new_total is not None and new_total != event.total_tickets:
                venue = await db.get(Venue, event.venue_id)
                if new_total > venue.capacity:
                    raise ValidationError(
                        f"total_tickets exceeds venue capacity of {venue.capacity}",
                        field="total_tickets"
                    )
                await db.flush()
                result = await db.execute(
                    update(_events)
                    .where(
                        _events.c.id == event.id,
                        _events.c.total_tickets - _events.c.available_tickets <= new_total
                    )
                    .values(
                        available_tickets=_events.c.available_tickets + (new_total - _events.c.total_tickets),
                        total_tickets=new_total,
                        updated_at=utcnow()
                    )
                )
                await db.refresh(event, ["total_tickets", "available_tickets", "updated_at"])
                if result.rowcount != 1:
                    raise ValidationError(
                        f"total_tickets cannot be lower than the {event.tickets_sold} tickets already sold",
                        field="total_tickets"
                    )

        logger.info(f"Event updated: {event.id} by {ctx.user_id}")
        return event

    async def set_active(self, db: AsyncSession, ctx: AuthContext, event_id: UUID, is_active: bool) -> Event:
        async with db_manager.transaction(db):
            event = await self.get_event(db, event_id, include_inactive=True)
            self.ensure_can_manage(ctx, event)
            if is_active and not ctx.is_admin:
                raise AuthorizationError("Only admins can re-activate events")
            event.is_active = is_active

        logger.info(f"Event {event.id} {'activated' if is_active else 'deactivated'} by {ctx.user_id}")
        return event

    async def reserve_tickets(self, db: AsyncSession, event: Event, quantity: int) -> bool:
        """
        Atomically take quantity tickets out of the event's inventory.

        The decrement only happens when enough tickets remain, so two
        concurrent reservations can never oversell. Returns False when the
        event is inactive or short of tickets.
        """
        result = await db.execute(
            update(_events)
            .where(
                _events.c.id == event.id,
                _events.c.is_active.is_(True),
                _events.c.available_tickets >= quantity
            )
            .values(
                available_tickets=_events.c.available_tickets - quantity,
                updated_at=utcnow()
            )
        )
        await db.refresh(event, ["available_tickets", "updated_at"])
        return result.rowcount == 1

    async def release_tickets(self, db: AsyncSession, event: Event, quantity: int) -> None:
        """Give quantity reserved tickets back to the event's inventory"""
        result = await db.execute(
            update(_events)
            .where(
                _events.c.id == event.id,
                _events.c.available_tickets + quantity <= _events.c.total_tickets
            )
            .values(
                available_tickets=_events.c.available_tickets + quantity,
                updated_at=utcnow()
            )
        )
        await db.refresh(event, ["available_tickets", "updated_at"])
        if result.rowcount != 1:
            logger.error(f"Releasing {quantity} tickets would overflow event {event.id}")
            raise ValidationError("Released quantity exceeds the event's ticket allocation")

    async def get_sales_summary(self, db: AsyncSession, ctx: AuthContext, event_id: UUID) -> dict:
        event = await self.get_event(db, event_id, include_inactive=True)
        self.ensure_can_manage(ctx, event)

        status_rows = await db.execute(
            select(Booking.status, func.count(Booking.id))
            .where(Booking.event_id == event.id)
            .group_by(Booking.status)
        )
        bookings_by_status = {status.value: 0 for status in BookingStatus}
        for status, count in status_rows.all():
            bookings_by_status[BookingStatus(status).value] = count

        revenue = (await db.execute(
            select(func.coalesce(func.sum(Payment.amount), 0))
            .join(Booking, Payment.booking_id == Booking.id)
            .where(
                Booking.event_id == event.id,
                Payment.status == PaymentStatus.COMPLETED
            )
        )).scalar_one()

        return {
            "event_id": event.id,
            "title": event.title,
            "total_tickets": event.total_tickets,
            "available_tickets": event.available_tickets,
            "tickets_sold": event.tickets_sold,
            "confirmed_revenue": Decimal(str(revenue)).quantize(Decimal("0.01")),
            "bookings_by_status": bookings_by_status,
        }

    async def get_organizer_summary(self, db: AsyncSession, ctx: AuthContext) -> dict:
        """Totals across every event the caller organizes"""
        own = Event.organizer_id == ctx.user_id

        total_events, active_events = (await db.execute(
            select(
                func.count(Event.id),
                func.count(Event.id).filter(Event.is_active.is_(True), Event.starts_at > utcnow())
            ).where(own)
        )).one()

        tickets_sold, total_customers = (await db.execute(
            select(
                func.coalesce(func.sum(Booking.quantity), 0),
                func.count(func.distinct(Booking.customer_id))
            )
            .join(Event, Booking.event_id == Event.id)
            .where(own, Booking.status.in_([BookingStatus.CONFIRMED, BookingStatus.COMPLETED]))
        )).one()

        revenue = (await db.execute(
            select(func.coalesce(func.sum(Payment.amount), 0))
            .join(Booking, Payment.booking_id == Booking.id)
            .join(Event, Booking.event_id == Event.id)
            .where(own, Payment.status == PaymentStatus.COMPLETED)
        )).scalar_one()

        return {
            "total_events": total_events,
            "active_events": active_events,
            "tickets_sold": int(tickets_sold),
            "total_customers": total_customers,
            "confirmed_revenue": Decimal(str(revenue)).quantize(Decimal("0.01")),
        }


event_service = EventService()
