"""
Public venue endpoints
"""

from typing import Any, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.core.database import get_session
from eventhub.schemas.response import PaginatedResponse, PaginationMeta
from eventhub.schemas.venue import VenueDetail, VenueResponse
from eventhub.services.venue_service import venue_service

router = APIRouter()


@router.get("/", response_model=PaginatedResponse[VenueResponse])
async def get_venues(
    db: AsyncSession = Depends(get_session),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    search: Optional[str] = None
) -> Any:
    venues, total = await venue_service.list_venues(
        db,
        search=search,
        skip=(page - 1) * per_page,
        limit=per_page
    )
    return {
        "data": [VenueResponse.model_validate(venue) for venue in venues],
        "pagination": PaginationMeta.build(page, per_page, total)
    }


@router.get("/{venue_id}", response_model=VenueDetail)
async def get_venue(
    venue_id: UUID,
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Get venue details with the number of events it hosts
    """
    venue = await venue_service.get_venue(db, venue_id)
    detail = VenueDetail.model_validate(venue)
    detail.event_count = await venue_service.count_events(db, venue.id, active_only=True)
    return detail
