"""
Flight model. Flights are save-only: seats are shown, never decremented here.
"""

from sqlalchemy import Column, DateTime, Integer, Numeric, String

from wayfare.db.base import Base, SoftDeleteMixin, TimestampMixin, new_id


class Flight(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "flights"

    id = Column(String(36), primary_key=True, default=new_id)
    airline = Column(String(100), nullable=False)
    flight_number = Column(String(20), nullable=False)
    origin_airport = Column(String(3), nullable=False, index=True)
    destination_airport = Column(String(3), nullable=False, index=True)
    departure_time = Column(DateTime(timezone=True), nullable=False)
    arrival_time = Column(DateTime(timezone=True), nullable=False)
    class_type = Column(String(20), nullable=False, default="economy")
    available_seats = Column(Integer, nullable=False, default=0)
    price = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")

    def __repr__(self) -> str:
        return f"<Flight(id={self.id}, {self.airline} {self.flight_number})>"
