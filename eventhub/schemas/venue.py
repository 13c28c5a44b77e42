"""
Venue schemas for request/response models
"""

from typing import Optional
from pydantic import Field

from eventhub.schemas.base import BaseSchema, IDSchema, TimestampSchema


class VenueBase(BaseSchema):
    name: str = Field(..., min_length=1, max_length=200)
    location: str = Field(..., min_length=1, max_length=200)
    address: Optional[str] = Field(None, max_length=500)
    capacity: int = Field(..., gt=0)


class VenueCreate(VenueBase):
    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Music Hall",
                "location": "Chicago",
                "address": "789 Arts District, Chicago, IL 60601",
                "capacity": 800
            }
        }
    }


class VenueUpdate(BaseSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    location: Optional[str] = Field(None, min_length=1, max_length=200)
    address: Optional[str] = Field(None, max_length=500)
    capacity: Optional[int] = Field(None, gt=0)


class VenueResponse(VenueBase, IDSchema, TimestampSchema):
    pass


class VenueDetail(VenueResponse):
    event_count: int = 0
