"""
Booking endpoints
"""

from typing import Any, Literal, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.core.database import get_session
from eventhub.core.security import AuthContext, get_auth_context, require_customer
from eventhub.models.booking import BookingStatus
from eventhub.schemas.booking import BookingCancelResponse, BookingCreate, BookingDetail, BookingResponse
from eventhub.schemas.response import PaginatedResponse, PaginationMeta
from eventhub.services.booking_service import booking_service

router = APIRouter()


@router.post("/", response_model=BookingDetail, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    ctx: AuthContext = Depends(require_customer),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Reserve tickets for an event. The booking stays pending until paid.
    """
    return await booking_service.create_booking(
        db,
        ctx,
        event_id=booking_data.event_id,
        quantity=booking_data.quantity,
        discount_code=booking_data.discount_code
    )


@router.get("/", response_model=PaginatedResponse[BookingResponse])
async def get_my_bookings(
    ctx: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_session),
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1, le=100),
    status: Optional[BookingStatus] = None,
    time_filter: Optional[Literal["upcoming", "past"]] = None,
    search: Optional[str] = None,
    sort_by: Literal["date-asc", "date-desc", "amount-asc", "amount-desc"] = "date-desc"
) -> Any:
    """
    List the caller's bookings
    """
    bookings, total = await booking_service.list_customer_bookings(
        db,
        ctx,
        status=status,
        time_filter=time_filter,
        search=search,
        sort_by=sort_by,
        skip=(page - 1) * per_page,
        limit=per_page
    )
    return {
        "data": [BookingResponse.model_validate(booking) for booking in bookings],
        "pagination": PaginationMeta.build(page, per_page, total)
    }


@router.get("/{booking_id}", response_model=BookingDetail)
async def get_booking(
    booking_id: UUID,
    ctx: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_session)
) -> Any:
    return await booking_service.get_booking(db, ctx, booking_id)


@router.post("/{booking_id}/cancel", response_model=BookingCancelResponse)
async def cancel_booking(
    booking_id: UUID,
    ctx: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Cancel a pending booking and release its tickets
    """
    booking = await booking_service.cancel_booking(db, ctx, booking_id)
    return {
        "success": True,
        "message": f"Booking {booking.booking_reference} cancelled",
        "booking_id": booking.id,
        "status": booking.status,
        "released_tickets": booking.quantity
    }
