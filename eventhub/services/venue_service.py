"""
Venue Service
"""

import logging
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.core.database import db_manager
from eventhub.core.exceptions import ConflictError, NotFoundError, ValidationError
from eventhub.models.event import Event
from eventhub.models.venue import Venue
from eventhub.schemas.venue import VenueCreate, VenueUpdate

logger = logging.getLogger(__name__)


class VenueService:
    """CRUD for venues"""

    async def list_venues(
        self,
        db: AsyncSession,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[Venue], int]:
        filters = []
        if search:
            filters.append(
                or_(
                    Venue.name.ilike(f"%{search}%"),
                    Venue.location.ilike(f"%{search}%")
                )
            )

        total = (await db.execute(select(func.count(Venue.id)).where(*filters))).scalar_one()
        stmt = select(Venue).where(*filters).order_by(Venue.name, Venue.id).offset(skip).limit(limit)
        result = await db.execute(stmt)
        return list(result.scalars().all()), total

    async def get_venue(self, db: AsyncSession, venue_id: UUID) -> Venue:
        venue = await db.get(Venue, venue_id)
        if not venue:
            raise NotFoundError("Venue", venue_id)
        return venue

    async def count_events(self, db: AsyncSession, venue_id: UUID, active_only: bool = False) -> int:
        stmt = select(func.count(Event.id)).where(Event.venue_id == venue_id)
        if active_only:
            stmt = stmt.where(Event.is_active.is_(True))
        return (await db.execute(stmt)).scalar_one()

    async def create_venue(self, db: AsyncSession, data: VenueCreate) -> Venue:
        async with db_manager.transaction(db):
            venue = Venue(**data.model_dump())
            db.add(venue)
            await db.flush()

        logger.info(f"Venue created: {venue.id} ({venue.name})")
        return venue

    async def update_venue(self, db: AsyncSession, venue_id: UUID, data: VenueUpdate) -> Venue:
        async with db_manager.transaction(db):
            venue = await self.get_venue(db, venue_id)
            changes = data.model_dump(exclude_unset=True)

            new_capacity = changes.get("capacity")
            if new_capacity is not None:
                largest = (await db.execute(
                    select(func.coalesce(func.max(Event.total_tickets), 0))
                    .where(Event.venue_id == venue.id)
                )).scalar_one()
                if new_capacity < largest:
                    raise ValidationError(
                        f"Capacity cannot be lower than an event allocation of {largest} tickets",
                        field="capacity"
                    )

            for field, value in changes.items():
                setattr(venue, field, value)

        logger.info(f"Venue updated: {venue.id}")
        return venue

    async def delete_venue(self, db: AsyncSession, venue_id: UUID) -> None:
        async with db_manager.transaction(db):
            venue = await self.get_venue(db, venue_id)
            event_count = await self.count_events(db, venue.id)
            if event_count:
                raise ConflictError(
                    "Cannot delete a venue that has events",
                    {"venue_id": str(venue.id), "event_count": event_count}
                )
            await db.delete(venue)

        logger.info(f"Venue deleted: {venue_id}")


venue_service = VenueService()
