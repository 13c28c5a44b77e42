"""
Organizer endpoints: manage own events and follow their sales
"""

from typing import Any, List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.core.database import get_session
from eventhub.core.security import AuthContext, require_organizer
from eventhub.models.booking import BookingStatus
from eventhub.schemas.booking import BookingDetail
from eventhub.schemas.event import (
    EventCreate,
    EventResponse,
    EventSalesSummary,
    EventUpdate,
    OrganizerDashboard,
)
from eventhub.schemas.response import MessageResponse
from eventhub.services.booking_service import booking_service
from eventhub.services.event_service import event_service

router = APIRouter()


@router.get("/dashboard", response_model=OrganizerDashboard)
async def get_dashboard(
    ctx: AuthContext = Depends(require_organizer),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Sales totals across all of the caller's events
    """
    return await event_service.get_organizer_summary(db, ctx)


@router.get("/events", response_model=List[EventResponse])
async def get_my_events(
    ctx: AuthContext = Depends(require_organizer),
    db: AsyncSession = Depends(get_session)
) -> Any:
    return await event_service.get_organizer_events(db, ctx)


@router.post("/events", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    event_data: EventCreate,
    ctx: AuthContext = Depends(require_organizer),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Create a new event; its whole ticket allocation starts out available
    """
    return await event_service.create_event(db, ctx, event_data)


@router.put("/events/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: UUID,
    event_update: EventUpdate,
    ctx: AuthContext = Depends(require_organizer),
    db: AsyncSession = Depends(get_session)
) -> Any:
    return await event_service.update_event(db, ctx, event_id, event_update)


@router.delete("/events/{event_id}", response_model=MessageResponse)
async def deactivate_event(
    event_id: UUID,
    ctx: AuthContext = Depends(require_organizer),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Take an event off sale. Existing bookings and tickets are kept.
    """
    event = await event_service.set_active(db, ctx, event_id, is_active=False)
    return {"success": True, "message": f"Event '{event.title}' deactivated"}


@router.get("/events/{event_id}/sales", response_model=EventSalesSummary)
async def get_event_sales(
    event_id: UUID,
    ctx: AuthContext = Depends(require_organizer),
    db: AsyncSession = Depends(get_session)
) -> Any:
    return await event_service.get_sales_summary(db, ctx, event_id)


@router.get("/events/{event_id}/bookings", response_model=List[BookingDetail])
async def get_event_bookings(
    event_id: UUID,
    ctx: AuthContext = Depends(require_organizer),
    db: AsyncSession = Depends(get_session),
    status: Optional[BookingStatus] = None
) -> Any:
    return await booking_service.list_event_bookings(db, ctx, event_id, status=status)
