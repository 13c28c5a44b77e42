"""
Base Pydantic schemas
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

# Prices and amounts, matching the Numeric(10, 2) columns
Money = Annotated[Decimal, Field(ge=0, max_digits=10, decimal_places=2)]


class BaseSchema(BaseModel):
    """ORM-readable schema; enums are emitted as their values"""
    model_config = ConfigDict(
        from_attributes=True,
        use_enum_values=True,
    )


class IDSchema(BaseSchema):
    id: UUID


class TimestampSchema(BaseSchema):
    created_at: datetime
    updated_at: Optional[datetime] = None
