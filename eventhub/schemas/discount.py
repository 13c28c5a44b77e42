"""
Discount code schemas
"""

from pydantic import Field, field_validator, model_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal

from eventhub.schemas.base import BaseSchema, IDSchema, TimestampSchema


class DiscountCreate(BaseSchema):
    code: str = Field(..., min_length=3, max_length=20)
    percentage: Decimal = Field(..., gt=0, le=100, max_digits=5, decimal_places=2)
    valid_from: datetime
    valid_to: datetime
    description: Optional[str] = Field(None, max_length=200)
    usage_limit: int = Field(0, ge=0)

    @field_validator('code')
    @classmethod
    def normalize_code(cls, v):
        return v.strip().upper()

    @model_validator(mode='after')
    def validate_window(self):
        if self.valid_to <= self.valid_from:
            raise ValueError('valid_to must be after valid_from')
        return self


class DiscountResponse(IDSchema, TimestampSchema):
    code: str
    percentage: Decimal
    valid_from: datetime
    valid_to: datetime
    is_active: bool
    description: Optional[str] = None
    usage_limit: int
    used_count: int
