"""
Venue model
"""

from sqlalchemy import Column, String, Integer, Text, CheckConstraint
from sqlalchemy.orm import relationship

from eventhub.models.base import BaseModel


class Venue(BaseModel):
    """
    Venue model for event locations
    """
    __tablename__ = "venues"
    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_venues_capacity_positive"),
    )

    name = Column(String(200), nullable=False, index=True)
    location = Column(String(200), nullable=False, index=True)
    address = Column(Text)
    capacity = Column(Integer, nullable=False)

    # Relationships
    events = relationship("Event", back_populates="venue")

    def __repr__(self):
        return f"<Venue(id={self.id}, name={self.name}, location={self.location}, capacity={self.capacity})>"
