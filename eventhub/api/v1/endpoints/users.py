"""
User profile endpoints
"""

from typing import Any
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.core.database import get_session
from eventhub.core.security import AuthContext, get_auth_context, get_current_user, require_customer
from eventhub.models.user import User
from eventhub.schemas.booking import CustomerDashboard
from eventhub.schemas.user import UserResponse, UserUpdate
from eventhub.services.booking_service import booking_service
from eventhub.services.user_service import user_service

router = APIRouter()


@router.get("/profile", response_model=UserResponse)
async def get_profile(
    current_user: User = Depends(get_current_user)
) -> Any:
    """
    Get the caller's profile, including the loyalty balance
    """
    return current_user


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    user_update: UserUpdate,
    ctx: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_session)
) -> Any:
    return await user_service.update_profile(db, ctx, user_update)


@router.get("/dashboard", response_model=CustomerDashboard)
async def get_dashboard(
    current_user: User = Depends(get_current_user),
    ctx: AuthContext = Depends(require_customer),
    db: AsyncSession = Depends(get_session)
) -> Any:
    stats = await booking_service.get_customer_stats(db, ctx)
    return {
        "full_name": current_user.full_name,
        "loyalty_points": current_user.loyalty_points,
        **stats
    }
