"""
User schemas
"""

from pydantic import EmailStr, Field, field_validator
from typing import Optional
import re

from eventhub.schemas.base import BaseSchema, IDSchema, TimestampSchema
from eventhub.models.user import UserRole

PASSWORD_PATTERN = r'^(?=.*[A-Za-z])(?=.*\d)(?=.*[@$!%*#?&])[A-Za-z\d@$!%*#?&]{8,}$'


class UserBase(BaseSchema):
    """Base user schema"""
    email: EmailStr
    full_name: str = Field(..., min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)


class UserCreate(UserBase):
    """User registration schema"""
    password: str = Field(..., min_length=8, max_length=72)
    role: UserRole = UserRole.CUSTOMER
    company: Optional[str] = Field(None, max_length=200)

    model_config = {
        "json_schema_extra": {
            "example": {
                "email": "demo@eventhub.com",
                "full_name": "Demo User",
                "phone": "+1234567890",
                "password": "Demo123!",
                "role": "customer"
            }
        }
    }

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        if not re.match(PASSWORD_PATTERN, v):
            raise ValueError('Password must contain at least one letter, one number, and one special character')
        return v

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v):
        if v and not re.match(r'^\+?[1-9]\d{1,14}$', v):
            raise ValueError('Invalid phone number format')
        return v

    @field_validator('role')
    @classmethod
    def validate_role(cls, v):
        if v == UserRole.ADMIN or v == UserRole.ADMIN.value:
            raise ValueError('Admin accounts cannot be self-registered')
        return v


class UserUpdate(BaseSchema):
    """User profile update schema"""
    full_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    company: Optional[str] = Field(None, max_length=200)


class UserResponse(UserBase, IDSchema, TimestampSchema):
    """User response schema"""
    role: UserRole
    loyalty_points: int
    company: Optional[str] = None
    is_active: bool


class UserRoleUpdate(BaseSchema):
    """Admin role change"""
    role: UserRole


class Token(BaseSchema):
    """Token schema with user info"""
    access_token: str
    token_type: str = "bearer"
    user: Optional[UserResponse] = None
