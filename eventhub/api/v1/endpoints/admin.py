"""
Admin management endpoints
"""

from typing import Any, List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.core.database import get_session
from eventhub.core.security import AuthContext, require_admin
from eventhub.models.user import UserRole
from eventhub.schemas.discount import DiscountCreate, DiscountResponse
from eventhub.schemas.response import MessageResponse, PaginatedResponse, PaginationMeta
from eventhub.schemas.user import UserResponse, UserRoleUpdate
from eventhub.schemas.venue import VenueCreate, VenueResponse, VenueUpdate
from eventhub.services.discount_service import discount_service
from eventhub.services.event_service import event_service
from eventhub.services.user_service import user_service
from eventhub.services.venue_service import venue_service

router = APIRouter()


# Venues

@router.post("/venues", response_model=VenueResponse, status_code=status.HTTP_201_CREATED)
async def create_venue(
    venue_data: VenueCreate,
    ctx: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session)
) -> Any:
    return await venue_service.create_venue(db, venue_data)


@router.put("/venues/{venue_id}", response_model=VenueResponse)
async def update_venue(
    venue_id: UUID,
    venue_update: VenueUpdate,
    ctx: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session)
) -> Any:
    return await venue_service.update_venue(db, venue_id, venue_update)


@router.delete("/venues/{venue_id}", response_model=MessageResponse)
async def delete_venue(
    venue_id: UUID,
    ctx: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Delete a venue. Venues that host events cannot be deleted.
    """
    await venue_service.delete_venue(db, venue_id)
    return {"success": True, "message": "Venue deleted"}


# Events

@router.post("/events/{event_id}/activate", response_model=MessageResponse)
async def activate_event(
    event_id: UUID,
    ctx: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session)
) -> Any:
    event = await event_service.set_active(db, ctx, event_id, is_active=True)
    return {"success": True, "message": f"Event '{event.title}' activated"}


@router.post("/events/{event_id}/deactivate", response_model=MessageResponse)
async def deactivate_event(
    event_id: UUID,
    ctx: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session)
) -> Any:
    event = await event_service.set_active(db, ctx, event_id, is_active=False)
    return {"success": True, "message": f"Event '{event.title}' deactivated"}


# Users

@router.get("/users", response_model=PaginatedResponse[UserResponse])
async def list_users(
    ctx: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    role: Optional[UserRole] = None,
    search: Optional[str] = None
) -> Any:
    users, total = await user_service.list_users(
        db,
        role=role,
        search=search,
        skip=(page - 1) * per_page,
        limit=per_page
    )
    return {
        "data": [UserResponse.model_validate(user) for user in users],
        "pagination": PaginationMeta.build(page, per_page, total)
    }


@router.put("/users/{user_id}/role", response_model=UserResponse)
async def update_user_role(
    user_id: UUID,
    role_update: UserRoleUpdate,
    ctx: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session)
) -> Any:
    return await user_service.change_role(db, ctx, user_id, role_update.role)


@router.post("/users/{user_id}/activate", response_model=MessageResponse)
async def activate_user(
    user_id: UUID,
    ctx: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session)
) -> Any:
    user = await user_service.set_active(db, ctx, user_id, is_active=True)
    return {"success": True, "message": f"User {user.email} activated"}


@router.post("/users/{user_id}/deactivate", response_model=MessageResponse)
async def deactivate_user(
    user_id: UUID,
    ctx: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session)
) -> Any:
    user = await user_service.set_active(db, ctx, user_id, is_active=False)
    return {"success": True, "message": f"User {user.email} deactivated"}


# Discount codes

@router.get("/discounts", response_model=List[DiscountResponse])
async def list_discounts(
    ctx: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
    active_only: bool = False
) -> Any:
    return await discount_service.list_discounts(db, active_only=active_only)


@router.post("/discounts", response_model=DiscountResponse, status_code=status.HTTP_201_CREATED)
async def create_discount(
    discount_data: DiscountCreate,
    ctx: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session)
) -> Any:
    return await discount_service.create_discount(db, discount_data)


@router.post("/discounts/{discount_id}/deactivate", response_model=MessageResponse)
async def deactivate_discount(
    discount_id: UUID,
    ctx: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session)
) -> Any:
    discount = await discount_service.deactivate_discount(db, discount_id)
    return {"success": True, "message": f"Discount code {discount.code} deactivated"}
