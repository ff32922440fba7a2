"""
Event model with spot inventory tracking.

Key design decisions:
- `available_spots` is denormalized and only changed by atomic conditional updates
- CHECK constraints keep 0 <= available_spots <= capacity at the DB level
- `ticket_types` is a list of {"type": str, "price": number} tiers
"""

from sqlalchemy import JSON, CheckConstraint, Column, DateTime, Index, Integer, String, Text

from wayfare.db.base import Base, SoftDeleteMixin, TimestampMixin, new_id


class Event(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(50), nullable=False, default="general")
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)
    location = Column(String(255), nullable=True)
    city = Column(String(100), nullable=False, index=True)
    country = Column(String(100), nullable=False)
    capacity = Column(Integer, nullable=False)
    available_spots = Column(Integer, nullable=False)
    ticket_types = Column(JSON, nullable=False, default=list)
    currency = Column(String(3), nullable=False, default="USD")

    __table_args__ = (
        CheckConstraint("available_spots >= 0", name="check_event_available_spots_non_negative"),
        CheckConstraint("capacity > 0", name="check_event_capacity_positive"),
        CheckConstraint("available_spots <= capacity", name="check_event_available_lte_capacity"),
        Index("ix_events_start_date", "start_date"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title}, available={self.available_spots}/{self.capacity})>"
