from sqlalchemy import Column, Integer, Numeric, String, Text

from wayfare.db.base import Base, SoftDeleteMixin, TimestampMixin, new_id


class DiningVenue(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "dining_venues"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    cuisine_type = Column(String(50), nullable=True)
    city = Column(String(100), nullable=False, index=True)
    country = Column(String(100), nullable=False)
    price_range = Column(Integer, nullable=False, default=2)
    average_rating = Column(Numeric(2, 1), nullable=True)
    capacity = Column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<DiningVenue(id={self.id}, name={self.name})>"
