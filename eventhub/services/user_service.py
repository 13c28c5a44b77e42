"""
User Service
Registration, authentication, profiles, admin moderation and loyalty balance
"""

import logging
from decimal import Decimal
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.config import settings
from eventhub.core.database import db_manager
from eventhub.core.exceptions import AuthenticationError, ConflictError, NotFoundError, ValidationError
from eventhub.core.security import AuthContext, get_password_hash, verify_password
from eventhub.models.user import User, UserRole
from eventhub.schemas.user import UserCreate, UserUpdate

logger = logging.getLogger(__name__)


class UserService:

    async def get_user(self, db: AsyncSession, user_id: UUID) -> User:
        user = await db.get(User, user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user

    async def get_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
        return result.scalar_one_or_none()

    async def register(self, db: AsyncSession, data: UserCreate) -> User:
        """Create a customer or organizer account"""
        role = UserRole(data.role)
        if role == UserRole.ADMIN:
            raise ValidationError("Admin accounts cannot be self-registered", field="role")

        async with db_manager.transaction(db):
            if await self.get_by_email(db, data.email):
                raise ConflictError("Email already registered", {"email": data.email})

            user = User(
                email=data.email.lower(),
                password_hash=get_password_hash(data.password),
                full_name=data.full_name,
                phone=data.phone,
                role=role,
                company=data.company if role == UserRole.ORGANIZER else None,
                loyalty_points=0,
                is_active=True,
            )
            db.add(user)
            await db.flush()

        logger.info(f"New user registered: {user.email} ({role.value})")
        return user

    async def authenticate(self, db: AsyncSession, email: str, password: str) -> User:
        user = await self.get_by_email(db, email)
        if not user or not verify_password(password, user.password_hash):
            logger.warning(f"Failed login attempt for: {email}")
            raise AuthenticationError("Incorrect email or password")
        if not user.is_active:
            raise AuthenticationError("User account is inactive")

        logger.info(f"User logged in: {user.email}")
        return user

    async def update_profile(self, db: AsyncSession, ctx: AuthContext, data: UserUpdate) -> User:
        async with db_manager.transaction(db):
            user = await self.get_user(db, ctx.user_id)
            changes = data.model_dump(exclude_unset=True)
            if "company" in changes and user.role != UserRole.ORGANIZER:
                changes.pop("company")
            for field, value in changes.items():
                setattr(user, field, value)

        logger.info(f"Profile updated: {user.id}")
        return user

    async def list_users(
        self,
        db: AsyncSession,
        role: Optional[UserRole] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[User], int]:
        filters = []
        if role:
            filters.append(User.role == role)
        if search:
            filters.append(
                User.email.ilike(f"%{search}%") | User.full_name.ilike(f"%{search}%")
            )

        total = (await db.execute(select(func.count(User.id)).where(*filters))).scalar_one()
        stmt = select(User).where(*filters).order_by(User.created_at.desc(), User.id).offset(skip).limit(limit)
        result = await db.execute(stmt)
        return list(result.scalars().all()), total

    async def set_active(self, db: AsyncSession, ctx: AuthContext, user_id: UUID, is_active: bool) -> User:
        if user_id == ctx.user_id and not is_active:
            raise ValidationError("Admins cannot deactivate their own account")

        async with db_manager.transaction(db):
            user = await self.get_user(db, user_id)
            user.is_active = is_active

        logger.info(f"User {user.id} {'activated' if is_active else 'deactivated'} by {ctx.user_id}")
        return user

    async def change_role(self, db: AsyncSession, ctx: AuthContext, user_id: UUID, role: UserRole) -> User:
        if user_id == ctx.user_id:
            raise ValidationError("Admins cannot change their own role", field="role")

        async with db_manager.transaction(db):
            user = await self.get_user(db, user_id)
            user.role = UserRole(role)

        logger.info(f"User {user.id} role changed to {UserRole(role).value} by {ctx.user_id}")
        return user

    def loyalty_points_for(self, amount: Decimal) -> int:
        """Whole currency units paid times the configured rate"""
        return int(amount) * settings.LOYALTY_POINTS_PER_UNIT

    async def credit_loyalty_points(self, db: AsyncSession, user_id: UUID, points: int) -> User:
        """Add points to a user's balance; runs inside the caller's transaction"""
        if points < 0:
            raise ValidationError("Loyalty credit must not be negative")

        user = await db.get(User, user_id, with_for_update=True)
        if not user:
            raise NotFoundError("User", user_id)
        user.loyalty_points = (user.loyalty_points or 0) + points
        await db.flush()
        return user


user_service = UserService()
