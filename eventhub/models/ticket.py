"""
Ticket model
"""

from sqlalchemy import Column, String, ForeignKey, Enum, DateTime, Uuid
from sqlalchemy.orm import relationship
import enum

from eventhub.models.base import BaseModel, utcnow


class TicketStatus(str, enum.Enum):
    ACTIVE = "active"
    USED = "used"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class Ticket(BaseModel):
    """
    Admit-one ticket issued for a paid booking
    """
    __tablename__ = "tickets"

    booking_id = Column(Uuid(as_uuid=True), ForeignKey("bookings.id"), nullable=False, index=True)
    ticket_number = Column(String(50), unique=True, nullable=False, index=True)
    qr_payload = Column(String(500), nullable=False)
    status = Column(
        Enum(TicketStatus),
        default=TicketStatus.ACTIVE,
        nullable=False,
        index=True
    )
    seat_number = Column(String(20))
    issued_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    used_at = Column(DateTime(timezone=True))

    # Relationships
    booking = relationship("Booking", back_populates="tickets")

    def __repr__(self):
        return f"<Ticket(id={self.id}, number={self.ticket_number}, status={self.status})>"
