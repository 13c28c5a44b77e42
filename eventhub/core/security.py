"""
Security utilities for authentication and authorization
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from uuid import UUID
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from eventhub.config import settings
from eventhub.core.database import get_session
from eventhub.core.exceptions import AuthenticationError, AuthorizationError
from eventhub.models.user import User, UserRole

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# OAuth2 scheme
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/auth/login")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


@dataclass(frozen=True)
class AuthContext:
    """
    Authenticated caller, passed explicitly into every service call
    """
    user_id: UUID
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_organizer(self) -> bool:
        return self.role == UserRole.ORGANIZER

    @classmethod
    def for_user(cls, user: User) -> "AuthContext":
        return cls(user_id=user.id, role=UserRole(user.role))


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    to_encode.update({
        "exp": now + expires_delta,
        "iat": now,
        "type": "access",
    })

    return jwt.encode(
        to_encode,
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM
    )


def create_user_token(user: User) -> str:
    role = user.role.value if isinstance(user.role, UserRole) else user.role
    return create_access_token(data={"sub": str(user.id), "email": user.email, "role": role})


def decode_token(token: str) -> Dict[str, Any]:
    """
    Decode and verify a JWT access token
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError as e:
        logger.warning(f"JWT decode error: {e}")
        raise AuthenticationError("Could not validate credentials")

    if payload.get("type") != "access":
        raise AuthenticationError("Invalid token type. Expected access")
    return payload


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_session)
) -> User:
    """
    Resolve the active user behind a bearer token
    """
    payload = decode_token(token)
    subject = payload.get("sub")
    if subject is None:
        raise AuthenticationError("Could not validate credentials")

    try:
        user_id = UUID(subject)
    except ValueError:
        raise AuthenticationError("Could not validate credentials")

    user = await db.get(User, user_id)
    if not user:
        raise AuthenticationError("User not found")
    if not user.is_active:
        raise AuthenticationError("User account is inactive")

    return user


async def get_auth_context(current_user: User = Depends(get_current_user)) -> AuthContext:
    return AuthContext.for_user(current_user)


def require_roles(*roles: UserRole):
    """
    Dependency factory: the caller must hold one of the given roles
    """
    async def checker(ctx: AuthContext = Depends(get_auth_context)) -> AuthContext:
        if ctx.role not in roles:
            allowed = ", ".join(role.value for role in roles)
            raise AuthorizationError(f"Requires role: {allowed}")
        return ctx

    return checker


require_admin = require_roles(UserRole.ADMIN)
require_organizer = require_roles(UserRole.ORGANIZER, UserRole.ADMIN)
require_customer = require_roles(UserRole.CUSTOMER, UserRole.ADMIN)
