"""
Authentication endpoints
"""

from typing import Any
from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.core.database import get_session
from eventhub.core.security import create_user_token, get_current_user
from eventhub.models.user import User
from eventhub.schemas.user import UserCreate, UserResponse, Token
from eventhub.services.user_service import user_service

router = APIRouter()


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Register a new customer or organizer
    """
    user = await user_service.register(db, user_data)
    return {
        "access_token": create_user_token(user),
        "token_type": "bearer",
        "user": UserResponse.model_validate(user)
    }


@router.post("/login", response_model=Token)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    OAuth2 compatible token login
    """
    user = await user_service.authenticate(db, form_data.username, form_data.password)
    return {
        "access_token": create_user_token(user),
        "token_type": "bearer",
        "user": UserResponse.model_validate(user)
    }


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_user)
) -> Any:
    return current_user
