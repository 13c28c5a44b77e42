"""
Public event catalogue endpoints
"""

from typing import Any, List, Literal, Optional
from datetime import datetime
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.core.database import get_session
from eventhub.schemas.event import EventResponse
from eventhub.schemas.response import PaginatedResponse, PaginationMeta
from eventhub.services.event_service import event_service

router = APIRouter()


@router.get("/", response_model=PaginatedResponse[EventResponse])
async def get_events(
    db: AsyncSession = Depends(get_session),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    search: Optional[str] = None,
    category: Optional[str] = None,
    location: Optional[str] = None,
    date: Optional[datetime] = None,
    sort_by: Literal["date-asc", "date-desc", "price-asc", "price-desc", "title"] = "date-asc"
) -> Any:
    """
    List active upcoming events with filtering, sorting and pagination
    """
    events, total = await event_service.list_events(
        db,
        search=search,
        category=category,
        location=location,
        on_date=date,
        sort_by=sort_by,
        skip=(page - 1) * per_page,
        limit=per_page
    )
    return {
        "data": [EventResponse.model_validate(event) for event in events],
        "pagination": PaginationMeta.build(page, per_page, total)
    }


@router.get("/categories", response_model=List[str])
async def get_categories(db: AsyncSession = Depends(get_session)) -> Any:
    return await event_service.list_categories(db)


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(
    event_id: UUID,
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Get event details
    """
    return await event_service.get_event(db, event_id)
