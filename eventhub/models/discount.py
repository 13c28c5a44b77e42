"""
Discount code model
"""

from sqlalchemy import Column, String, Integer, Numeric, DateTime, Boolean, CheckConstraint
from sqlalchemy.orm import relationship

from eventhub.models.base import BaseModel


class Discount(BaseModel):
    """
    Percentage discount code, optionally limited in number of uses
    """
    __tablename__ = "discounts"
    __table_args__ = (
        CheckConstraint("percentage > 0 AND percentage <= 100", name="ck_discounts_percentage_range"),
        CheckConstraint("usage_limit >= 0", name="ck_discounts_usage_limit_non_negative"),
    )

    code = Column(String(20), unique=True, nullable=False, index=True)
    percentage = Column(Numeric(5, 2), nullable=False)
    valid_from = Column(DateTime(timezone=True), nullable=False)
    valid_to = Column(DateTime(timezone=True), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    description = Column(String(200))
    usage_limit = Column(Integer, default=0, nullable=False)  # 0 = unlimited
    used_count = Column(Integer, default=0, nullable=False)

    # Relationships
    booking_discounts = relationship("BookingDiscount", back_populates="discount")

    def __repr__(self):
        return f"<Discount(code={self.code}, percentage={self.percentage}, used={self.used_count}/{self.usage_limit})>"
