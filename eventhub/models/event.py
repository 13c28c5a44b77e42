"""
Event model
"""

from sqlalchemy import (
    Column, String, Integer, Text, DateTime, ForeignKey, Numeric, Boolean, Uuid, CheckConstraint
)
from sqlalchemy.orm import relationship

from eventhub.models.base import BaseModel


class Event(BaseModel):
    """
    Event model for concerts, shows, etc.

    available_tickets is the live inventory: bookings reserve from it when
    created and give back to it when cancelled.
    """
    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint("total_tickets > 0", name="ck_events_total_tickets_positive"),
        CheckConstraint(
            "available_tickets >= 0 AND available_tickets <= total_tickets",
            name="ck_events_available_tickets_bounds"
        ),
        CheckConstraint("ticket_price >= 0", name="ck_events_ticket_price_non_negative"),
    )

    title = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    category = Column(String(50), nullable=False, index=True)
    starts_at = Column(DateTime(timezone=True), nullable=False, index=True)
    ticket_price = Column(Numeric(10, 2), nullable=False)
    total_tickets = Column(Integer, nullable=False)
    available_tickets = Column(Integer, nullable=False)
    image_url = Column(String(500))
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    venue_id = Column(Uuid(as_uuid=True), ForeignKey("venues.id"), nullable=False, index=True)
    organizer_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)

    # Relationships
    venue = relationship("Venue", back_populates="events")
    organizer = relationship("User", back_populates="organized_events")
    bookings = relationship("Booking", back_populates="event")

    @property
    def tickets_sold(self) -> int:
        return self.total_tickets - self.available_tickets

    @property
    def is_sold_out(self) -> bool:
        return self.available_tickets <= 0

    def __repr__(self):
        return f"<Event(id={self.id}, title={self.title}, available={self.available_tickets}/{self.total_tickets})>"
