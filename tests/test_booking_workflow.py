"""
Booking -> payment -> ticket workflow, exercised through the services
"""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from sqlalchemy import select, func

from eventhub.core.exceptions import (
    BookingStateError,
    InsufficientInventoryError,
    InvalidDiscountError,
    NotFoundError,
    PaymentError,
    ValidationError,
)
from eventhub.core.security import AuthContext
from eventhub.models import Booking, BookingStatus, Event, PaymentMethod, Ticket, TicketStatus, User
from eventhub.schemas.discount import DiscountCreate
from eventhub.services.booking_service import booking_service
from eventhub.services.discount_service import discount_service
from eventhub.services.payment_service import payment_service


async def pay(db_session, ctx, booking):
    return await payment_service.process_payment(
        db_session,
        ctx,
        booking.id,
        PaymentMethod.CREDIT_CARD,
        payment_service.amount_due(booking.total_amount)
    )


async def available(db_session, event_id) -> int:
    return (await db_session.execute(
        select(Event.available_tickets).where(Event.id == event_id)
    )).scalar_one()


@pytest.mark.unit
@pytest.mark.asyncio
class TestBookingCreation:

    async def test_reserves_inventory_and_starts_pending(self, db_session, customer_ctx, make_event):
        event = await make_event(ticket_price=Decimal("25.00"), total_tickets=10)

        booking = await booking_service.create_booking(db_session, customer_ctx, event.id, 3)

        assert booking.status == BookingStatus.PENDING
        assert booking.quantity == 3
        assert booking.total_amount == Decimal("75.00")
        assert booking.customer_id == customer_ctx.user_id
        assert booking.booking_reference.startswith("BK")
        assert len(booking.booking_reference) == 2 + 14 + 4
        assert booking.tickets == []
        assert await available(db_session, event.id) == 7

    async def test_sold_out_example(self, db_session, customer_ctx, make_event):
        event = await make_event(total_tickets=5)
        event_id = event.id

        await booking_service.create_booking(db_session, customer_ctx, event_id, 5)
        assert await available(db_session, event_id) == 0

        with pytest.raises(InsufficientInventoryError) as exc_info:
            await booking_service.create_booking(db_session, customer_ctx, event_id, 1)

        assert exc_info.value.details["requested"] == 1
        assert exc_info.value.details["available"] == 0
        assert await available(db_session, event_id) == 0
        booking_count = (await db_session.execute(
            select(func.count(Booking.id)).where(Booking.event_id == event_id)
        )).scalar_one()
        assert booking_count == 1

    async def test_quantity_bounds(self, db_session, customer_ctx, event):
        event_id = event.id
        with pytest.raises(ValidationError):
            await booking_service.create_booking(db_session, customer_ctx, event_id, 0)
        with pytest.raises(ValidationError):
            await booking_service.create_booking(db_session, customer_ctx, event_id, 11)
        assert await available(db_session, event_id) == 100

    async def test_inactive_event_not_bookable(self, db_session, customer_ctx, make_event):
        event = await make_event(is_active=False)
        with pytest.raises(NotFoundError):
            await booking_service.create_booking(db_session, customer_ctx, event.id, 1)

    async def test_booking_references_are_unique(self, db_session, customer_ctx, event):
        references = set()
        for _ in range(5):
            booking = await booking_service.create_booking(db_session, customer_ctx, event.id, 1)
            references.add(booking.booking_reference)
        assert len(references) == 5

    async def test_calculate_total_amount(self):
        assert booking_service.calculate_total_amount(Decimal("40.00"), 3) == Decimal("120.00")
        assert booking_service.calculate_total_amount(Decimal("40.00"), 2, Decimal("10")) == Decimal("72.00")
        assert booking_service.calculate_total_amount(Decimal("9.99"), 1, Decimal("15")) == Decimal("8.49")


@pytest.mark.unit
@pytest.mark.asyncio
class TestDiscounts:

    async def _discount(self, db_session, code="SAVE10", percentage="10", usage_limit=0, days=1):
        now = datetime.now(timezone.utc)
        return await discount_service.create_discount(db_session, DiscountCreate(
            code=code,
            percentage=Decimal(percentage),
            valid_from=now - timedelta(days=days),
            valid_to=now + timedelta(days=days),
            usage_limit=usage_limit,
        ))

    async def test_discount_applied_and_recorded(self, db_session, customer_ctx, event):
        await self._discount(db_session)

        booking = await booking_service.create_booking(db_session, customer_ctx, event.id, 2, discount_code="save10")

        assert booking.total_amount == Decimal("72.00")
        assert len(booking.discounts) == 1
        assert booking.discounts[0].discount_amount == Decimal("8.00")

    async def test_unknown_code_rejected_without_reserving(self, db_session, customer_ctx, event):
        event_id = event.id
        with pytest.raises(InvalidDiscountError):
            await booking_service.create_booking(db_session, customer_ctx, event_id, 2, discount_code="NOPE")
        assert await available(db_session, event_id) == 100

    async def test_usage_limit_enforced(self, db_session, customer_ctx, event):
        discount = await self._discount(db_session, code="ONCE", usage_limit=1)
        event_id = event.id

        await booking_service.create_booking(db_session, customer_ctx, event_id, 1, discount_code="ONCE")
        with pytest.raises(InvalidDiscountError):
            await booking_service.create_booking(db_session, customer_ctx, event_id, 1, discount_code="ONCE")

        await db_session.refresh(discount)
        assert discount.used_count == 1
        assert await available(db_session, event_id) == 99

    async def test_deactivated_code_rejected(self, db_session, customer_ctx, event):
        discount = await self._discount(db_session, code="GONE")
        await discount_service.deactivate_discount(db_session, discount.id)

        with pytest.raises(InvalidDiscountError):
            await booking_service.create_booking(db_session, customer_ctx, event.id, 1, discount_code="GONE")


@pytest.mark.unit
@pytest.mark.asyncio
class TestPayment:

    async def test_payment_issues_one_ticket_per_unit(self, db_session, customer_ctx, make_event):
        event = await make_event(total_tickets=10)
        event_id = event.id
        booking = await booking_service.create_booking(db_session, customer_ctx, event_id, 4)

        result = await pay(db_session, customer_ctx, booking)

        assert result["ticket_count"] == 4
        numbers = [ticket.ticket_number for ticket in result["tickets"]]
        assert len(set(numbers)) == 4
        assert numbers[0] == f"TKT-{booking.booking_reference}-001"
        assert all(ticket.status == TicketStatus.ACTIVE for ticket in result["tickets"])

        stored = (await db_session.execute(
            select(func.count(Ticket.id)).where(Ticket.booking_id == booking.id)
        )).scalar_one()
        assert stored == 4

        confirmed = await booking_service.get_booking(db_session, customer_ctx, booking.id)
        assert confirmed.status == BookingStatus.CONFIRMED
        assert confirmed.confirmed_at is not None
        assert confirmed.payment.transaction_id.startswith("TXN")
        # Paying confirms the reservation; it does not take inventory again
        assert await available(db_session, event_id) == 6

    async def test_amount_due_includes_service_fee(self):
        assert payment_service.amount_due(Decimal("40.00")) == Decimal("42.00")
        assert payment_service.amount_due(Decimal("19.99")) == Decimal("20.99")

    async def test_loyalty_points_for_42_payment(self, db_session, customer, customer_ctx, make_event):
        event = await make_event(ticket_price=Decimal("40.00"))
        booking = await booking_service.create_booking(db_session, customer_ctx, event.id, 1)

        result = await pay(db_session, customer_ctx, booking)

        assert result["payment"].amount == Decimal("42.00")
        assert result["loyalty_points_earned"] == 42
        user = await db_session.get(User, customer_ctx.user_id)
        await db_session.refresh(user)
        assert user.loyalty_points == 42

    async def test_wrong_amount_rolls_back(self, db_session, customer_ctx, event):
        booking = await booking_service.create_booking(db_session, customer_ctx, event.id, 1)
        booking_id = booking.id

        with pytest.raises(PaymentError):
            await payment_service.process_payment(
                db_session, customer_ctx, booking_id, PaymentMethod.PAYPAL, Decimal("40.00")
            )

        reloaded = await booking_service.get_booking(db_session, customer_ctx, booking_id)
        assert reloaded.status == BookingStatus.PENDING
        assert reloaded.payment is None
        assert reloaded.tickets == []
        user = await db_session.get(User, customer_ctx.user_id)
        await db_session.refresh(user)
        assert user.loyalty_points == 0

    async def test_second_payment_rejected(self, db_session, customer_ctx, event):
        booking = await booking_service.create_booking(db_session, customer_ctx, event.id, 2)
        await pay(db_session, customer_ctx, booking)
        booking_id = booking.id

        with pytest.raises(BookingStateError):
            await pay(db_session, customer_ctx, booking)

        stored = (await db_session.execute(
            select(func.count(Ticket.id)).where(Ticket.booking_id == booking_id)
        )).scalar_one()
        assert stored == 2

    async def test_cannot_pay_someone_elses_booking(self, db_session, customer_ctx, other_customer, event):
        booking = await booking_service.create_booking(db_session, customer_ctx, event.id, 1)
        with pytest.raises(NotFoundError):
            await pay(db_session, AuthContext.for_user(other_customer), booking)


@pytest.mark.unit
@pytest.mark.asyncio
class TestCancellation:

    async def test_cancel_restores_reserved_quantity(self, db_session, customer_ctx, event):
        event_id = event.id
        booking = await booking_service.create_booking(db_session, customer_ctx, event_id, 4)
        assert await available(db_session, event_id) == 96

        cancelled = await booking_service.cancel_booking(db_session, customer_ctx, booking.id)

        assert cancelled.status == BookingStatus.CANCELLED
        assert cancelled.cancelled_at is not None
        assert await available(db_session, event_id) == 100

    async def test_cancel_twice_rejected(self, db_session, customer_ctx, event):
        event_id = event.id
        booking = await booking_service.create_booking(db_session, customer_ctx, event_id, 2)
        booking_id = booking.id
        await booking_service.cancel_booking(db_session, customer_ctx, booking_id)

        with pytest.raises(BookingStateError):
            await booking_service.cancel_booking(db_session, customer_ctx, booking_id)
        assert await available(db_session, event_id) == 100

    async def test_confirmed_booking_cannot_be_cancelled(self, db_session, customer_ctx, event):
        event_id = event.id
        booking = await booking_service.create_booking(db_session, customer_ctx, event_id, 2)
        booking_id = booking.id
        await pay(db_session, customer_ctx, booking)

        with pytest.raises(BookingStateError) as exc_info:
            await booking_service.cancel_booking(db_session, customer_ctx, booking_id)

        assert exc_info.value.details["status"] == "confirmed"
        assert await available(db_session, event_id) == 98

    async def test_only_owner_or_admin_can_cancel(self, db_session, customer_ctx, other_customer, admin_ctx, event):
        booking = await booking_service.create_booking(db_session, customer_ctx, event.id, 1)
        booking_id = booking.id

        with pytest.raises(NotFoundError):
            await booking_service.cancel_booking(db_session, AuthContext.for_user(other_customer), booking_id)

        cancelled = await booking_service.cancel_booking(db_session, admin_ctx, booking_id)
        assert cancelled.status == BookingStatus.CANCELLED


@pytest.mark.unit
@pytest.mark.asyncio
async def test_inventory_stays_within_bounds(db_session, customer_ctx, make_event):
    """Serial mix of bookings, cancellations, payments and rejections"""
    event = await make_event(total_tickets=12)
    event_id = event.id
    held = {}

    async def check():
        remaining = await available(db_session, event_id)
        assert 0 <= remaining <= 12
        assert remaining == 12 - sum(held.values())

    for quantity in (3, 4, 5):
        booking = await booking_service.create_booking(db_session, customer_ctx, event_id, quantity)
        held[booking.id] = quantity
        await check()

    first, second, _ = list(held)
    with pytest.raises(InsufficientInventoryError):
        await booking_service.create_booking(db_session, customer_ctx, event_id, 1)
    await check()

    await booking_service.cancel_booking(db_session, customer_ctx, second)
    held.pop(second)
    await check()

    confirmed = await booking_service.get_booking(db_session, customer_ctx, first)
    await pay(db_session, customer_ctx, confirmed)
    await check()

    with pytest.raises(BookingStateError):
        await booking_service.cancel_booking(db_session, customer_ctx, first)
    await check()

    booking = await booking_service.create_booking(db_session, customer_ctx, event_id, 4)
    held[booking.id] = 4
    await check()

    with pytest.raises(InsufficientInventoryError):
        await booking_service.create_booking(db_session, customer_ctx, event_id, 1)
    await check()
