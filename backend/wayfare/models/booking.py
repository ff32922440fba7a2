"""
Booking model: a user's reservation of a bookable resource.

Key design decisions:
- `reference_id` points at a row of the table named by `booking_type`
- `guests` is the quantity deducted from capacity (tickets, seats, guests)
- Status is never rolled back; cancelled rows stay for history
"""

import enum

from sqlalchemy import JSON, CheckConstraint, Column, DateTime, Index, Integer, Numeric, String, Text

from wayfare.db.base import Base, TimestampMixin, new_id, utcnow


class BookingType(str, enum.Enum):
    ACCOMMODATION = "accommodation"
    EVENT = "event"
    TRANSPORT = "transport"
    FLIGHT = "flight"
    DINING = "dining"


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

    @property
    def is_terminal(self) -> bool:
        return self in (BookingStatus.CANCELLED, BookingStatus.COMPLETED)


# Statuses that hold capacity or block an interval
LIVE_STATUSES = (BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value)

ALLOWED_TRANSITIONS = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.COMPLETED, BookingStatus.CANCELLED},
    BookingStatus.CANCELLED: set(),
    BookingStatus.COMPLETED: set(),
}


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(64), nullable=False, index=True)
    booking_type = Column(String(20), nullable=False)
    reference_id = Column(String(36), nullable=False)
    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value)
    booking_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=True)
    guests = Column(Integer, nullable=False, default=1)
    total_price = Column(Numeric(12, 2), nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="USD")
    special_requests = Column(Text, nullable=True)
    # "metadata" is reserved on declarative classes
    extra = Column("metadata", JSON, nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint("guests > 0", name="check_booking_guests_positive"),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled', 'completed')",
            name="check_booking_status",
        ),
        CheckConstraint(
            "booking_type IN ('accommodation', 'event', 'transport', 'flight', 'dining')",
            name="check_booking_type",
        ),
        # Overlap scans: same resource, live statuses, date window
        Index("ix_bookings_reference", "booking_type", "reference_id", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, user={self.user_id}, type={self.booking_type}, "
            f"ref={self.reference_id}, status={self.status})>"
        )
