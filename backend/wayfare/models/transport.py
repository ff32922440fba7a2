"""
Transport option model (bus, train, ferry routes) with seat inventory.
"""

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, Numeric, String

from wayfare.db.base import Base, SoftDeleteMixin, TimestampMixin, new_id


class TransportOption(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "transport_options"

    id = Column(String(36), primary_key=True, default=new_id)
    provider = Column(String(255), nullable=False)
    transport_type = Column(String(50), nullable=False)
    route_name = Column(String(255), nullable=False)
    origin = Column(String(100), nullable=False, index=True)
    destination = Column(String(100), nullable=False, index=True)
    departure_time = Column(DateTime(timezone=True), nullable=False)
    arrival_time = Column(DateTime(timezone=True), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    total_seats = Column(Integer, nullable=False)
    available_seats = Column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint("available_seats >= 0", name="check_transport_available_seats_non_negative"),
        CheckConstraint("total_seats > 0", name="check_transport_total_seats_positive"),
        CheckConstraint("available_seats <= total_seats", name="check_transport_available_lte_total"),
    )

    def __repr__(self) -> str:
        return (
            f"<TransportOption(id={self.id}, route={self.route_name}, "
            f"available={self.available_seats}/{self.total_seats})>"
        )
