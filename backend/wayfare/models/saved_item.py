"""
Saved item model: a user's bookmark of a listing.

The unique constraint backs the service-level duplicate check, so a racing
second save fails at insert time instead of creating a duplicate row.
"""

from sqlalchemy import CheckConstraint, Column, DateTime, String, Text, UniqueConstraint, func

from wayfare.db.base import Base, new_id, utcnow


class SavedItem(Base):
    __tablename__ = "saved_items"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(64), nullable=False, index=True)
    item_type = Column(String(20), nullable=False)
    item_id = Column(String(36), nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "item_type", "item_id", name="uq_saved_item_user_item"),
        CheckConstraint(
            "item_type IN ('accommodation', 'event', 'transport', 'flight', 'dining')",
            name="check_saved_item_type",
        ),
    )

    def __repr__(self) -> str:
        return f"<SavedItem(id={self.id}, user={self.user_id}, {self.item_type}={self.item_id})>"
