"""
Accommodation (stay) model.

Interval-shaped inventory: there is no counter, availability is derived
from live bookings overlapping the requested [check_in, check_out).
"""

from sqlalchemy import JSON, CheckConstraint, Column, Integer, Numeric, String, Text

from wayfare.db.base import Base, SoftDeleteMixin, TimestampMixin, new_id


class Accommodation(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "accommodations"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    property_type = Column(String(50), nullable=False, default="apartment")
    city = Column(String(100), nullable=False, index=True)
    country = Column(String(100), nullable=False)
    bedrooms = Column(Integer, nullable=False, default=1)
    max_guests = Column(Integer, nullable=False)
    price_per_night = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    amenities = Column(JSON, nullable=False, default=list)

    __table_args__ = (
        CheckConstraint("max_guests > 0", name="check_accommodation_max_guests_positive"),
        CheckConstraint("price_per_night >= 0", name="check_accommodation_price_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Accommodation(id={self.id}, name={self.name}, max_guests={self.max_guests})>"
