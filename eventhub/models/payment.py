"""
Payment model for transaction processing
"""

from sqlalchemy import Column, String, Numeric, Enum, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
import enum

from eventhub.models.base import BaseModel, utcnow


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, enum.Enum):
    CREDIT_CARD = "credit_card"
    PAYPAL = "paypal"
    BANK_TRANSFER = "bank_transfer"


class Payment(BaseModel):
    """
    Payment model, one-to-one with a booking
    """
    __tablename__ = "payments"

    booking_id = Column(Uuid(as_uuid=True), ForeignKey("bookings.id"), nullable=False, unique=True)
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), default="USD", nullable=False)
    status = Column(
        Enum(PaymentStatus),
        default=PaymentStatus.PENDING,
        nullable=False,
        index=True
    )
    payment_method = Column(
        Enum(PaymentMethod),
        nullable=False
    )
    transaction_id = Column(String(100), unique=True)
    details = Column(String(500))

    # Timestamps
    paid_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    refunded_at = Column(DateTime(timezone=True))

    # Relationships
    booking = relationship("Booking", back_populates="payment")

    def __repr__(self):
        return f"<Payment(id={self.id}, booking_id={self.booking_id}, amount={self.amount}, status={self.status})>"
