"""
Event schemas
"""

from pydantic import Field
from typing import Optional, Dict
from uuid import UUID
from datetime import datetime
from decimal import Decimal

from eventhub.schemas.base import BaseSchema, IDSchema, Money, TimestampSchema


class EventBase(BaseSchema):
    """Base event schema"""
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=1000)
    category: str = Field(..., min_length=1, max_length=50)
    starts_at: datetime
    ticket_price: Money
    image_url: Optional[str] = Field(None, max_length=500)


class EventCreate(EventBase):
    """Event creation schema"""
    venue_id: UUID
    total_tickets: int = Field(..., gt=0)

    model_config = {
        "json_schema_extra": {
            "example": {
                "title": "Jazz Night at the Blue Note",
                "description": "An intimate evening of smooth jazz featuring local artists",
                "category": "Music",
                "starts_at": "2026-12-15T20:00:00Z",
                "ticket_price": "45.00",
                "total_tickets": 150,
                "venue_id": "xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx"
            }
        }
    }


class EventUpdate(BaseSchema):
    """Event update schema"""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    category: Optional[str] = Field(None, min_length=1, max_length=50)
    starts_at: Optional[datetime] = None
    ticket_price: Optional[Money] = None
    total_tickets: Optional[int] = Field(None, gt=0)
    image_url: Optional[str] = Field(None, max_length=500)


class EventVenue(BaseSchema):
    id: UUID
    name: str
    location: str


class EventResponse(EventBase, IDSchema, TimestampSchema):
    """Event response schema"""
    total_tickets: int
    available_tickets: int
    is_active: bool
    organizer_id: UUID
    venue: EventVenue


class EventSalesSummary(BaseSchema):
    """Per-event sales figures for the organizer dashboard"""
    event_id: UUID
    title: str
    total_tickets: int
    available_tickets: int
    tickets_sold: int
    confirmed_revenue: Decimal
    bookings_by_status: Dict[str, int]


class OrganizerDashboard(BaseSchema):
    """Totals across all of an organizer's events"""
    total_events: int
    active_events: int
    tickets_sold: int
    total_customers: int
    confirmed_revenue: Decimal
