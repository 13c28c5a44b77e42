"""
Booking and BookingDiscount models
"""

from sqlalchemy import Column, String, Integer, ForeignKey, Enum, Numeric, DateTime, Uuid, CheckConstraint
from sqlalchemy.orm import relationship
import enum

from eventhub.models.base import BaseModel, utcnow


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class Booking(BaseModel):
    """
    Booking model: a reservation of N tickets for one event by one customer
    """
    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_bookings_quantity_positive"),
        CheckConstraint("total_amount >= 0", name="ck_bookings_total_amount_non_negative"),
    )

    booking_reference = Column(String(50), unique=True, nullable=False, index=True)
    customer_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    event_id = Column(Uuid(as_uuid=True), ForeignKey("events.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)
    status = Column(
        Enum(BookingStatus),
        default=BookingStatus.PENDING,
        nullable=False,
        index=True
    )
    booked_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    confirmed_at = Column(DateTime(timezone=True))
    cancelled_at = Column(DateTime(timezone=True))

    # Relationships
    customer = relationship("User", back_populates="bookings")
    event = relationship("Event", back_populates="bookings")
    payment = relationship("Payment", back_populates="booking", uselist=False)
    tickets = relationship(
        "Ticket",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="Ticket.ticket_number"
    )
    discounts = relationship("BookingDiscount", back_populates="booking", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Booking(id={self.id}, ref={self.booking_reference}, status={self.status}, qty={self.quantity})>"


class BookingDiscount(BaseModel):
    """
    Audit row for a discount code applied to a booking
    """
    __tablename__ = "booking_discounts"

    booking_id = Column(Uuid(as_uuid=True), ForeignKey("bookings.id"), nullable=False, index=True)
    discount_id = Column(Uuid(as_uuid=True), ForeignKey("discounts.id"), nullable=False, index=True)
    discount_amount = Column(Numeric(10, 2), nullable=False)

    # Relationships
    booking = relationship("Booking", back_populates="discounts")
    discount = relationship("Discount", back_populates="booking_discounts")

    def __repr__(self):
        return f"<BookingDiscount(booking_id={self.booking_id}, discount_id={self.discount_id}, amount={self.discount_amount})>"
