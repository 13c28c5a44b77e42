"""
User model
"""

from sqlalchemy import Column, String, Boolean, Enum, Integer, CheckConstraint
from sqlalchemy.orm import relationship
import enum

from eventhub.models.base import BaseModel


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    CUSTOMER = "customer"
    ORGANIZER = "organizer"


class User(BaseModel):
    """
    User model for authentication, profile and loyalty balance
    """
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("loyalty_points >= 0", name="ck_users_loyalty_points_non_negative"),
    )

    email = Column(String(150), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(100), nullable=False)
    phone = Column(String(20))
    role = Column(
        Enum(UserRole),
        default=UserRole.CUSTOMER,
        nullable=False
    )
    loyalty_points = Column(Integer, default=0, nullable=False)
    company = Column(String(200))  # Organizers only
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    bookings = relationship("Booking", back_populates="customer")
    organized_events = relationship("Event", back_populates="organizer")

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
