"""
SQLAlchemy implementation of the Resource Store.

Each write is committed on its own: the store serializes single-row
writes, and pairing two writes is the workflow's job (via compensation).
Counter changes are single conditional UPDATE statements, so the
"is there enough left?" check and the decrement cannot interleave with
another request:

    UPDATE events SET available_spots = available_spots - :n
    WHERE id = :id AND available_spots >= :n AND deleted_at IS NULL

Zero rows affected means the capacity was not there at commit time.
"""

from datetime import datetime
from typing import Any, Optional, Sequence

from sqlalchemy import case, delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wayfare.core.exceptions import IntegrityViolation, StoreError
from wayfare.core.logging import get_logger
from wayfare.models.booking import Booking
from wayfare.services.interfaces.store import ResourceStore

logger = get_logger(__name__)


class SqlAlchemyResourceStore(ResourceStore):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _failed(self, operation: str, error: SQLAlchemyError) -> StoreError:
        await self.session.rollback()
        logger.error("store_operation_failed", operation=operation, error=str(error))
        if isinstance(error, IntegrityError):
            return IntegrityViolation(operation, error)
        return StoreError(operation, error)

    async def fetch_one(self, model, row_id, exclude_soft_deleted=True):
        query = select(model).where(model.id == row_id)
        if exclude_soft_deleted and hasattr(model, "deleted_at"):
            query = query.where(model.deleted_at.is_(None))
        # Counters change behind the identity map; always read committed values
        query = query.execution_options(populate_existing=True)
        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            raise await self._failed("fetch_one", e) from e
        return result.scalar_one_or_none()

    async def find_one(self, model, **criteria):
        query = (
            select(model)
            .where(*[getattr(model, name) == value for name, value in criteria.items()])
            .limit(1)
            .execution_options(populate_existing=True)
        )
        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            raise await self._failed("find_one", e) from e
        return result.scalars().first()

    async def insert(self, obj):
        self.session.add(obj)
        try:
            await self.session.commit()
            await self.session.refresh(obj)
        except SQLAlchemyError as e:
            raise await self._failed("insert", e) from e
        return obj

    async def find_many(self, model, order_by=None, descending=False, **criteria):
        query = select(model).where(*[getattr(model, name) == value for name, value in criteria.items()])
        if order_by is not None:
            column = getattr(model, order_by)
            query = query.order_by(column.desc() if descending else column.asc())
        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            raise await self._failed("find_many", e) from e
        return list(result.scalars().all())

    async def update(self, model, row_id, patch: dict[str, Any], **expected):
        stmt = (
            update(model)
            .where(model.id == row_id)
            .where(*[getattr(model, name) == value for name, value in expected.items()])
            .values(**patch)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.session.execute(stmt)
            await self.session.commit()
        except SQLAlchemyError as e:
            raise await self._failed("update", e) from e
        if result.rowcount == 0:
            return None
        return await self.fetch_one(model, row_id, exclude_soft_deleted=False)

    async def delete(self, model, row_id, **criteria) -> bool:
        stmt = (
            delete(model)
            .where(model.id == row_id)
            .where(*[getattr(model, name) == value for name, value in criteria.items()])
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.session.execute(stmt)
            await self.session.commit()
        except SQLAlchemyError as e:
            raise await self._failed("delete", e) from e
        return result.rowcount > 0

    async def query_overlap(
        self,
        booking_type: str,
        resource_id: str,
        start: datetime,
        end: datetime,
        statuses: Sequence[str],
        exclude_booking_id: Optional[str] = None,
    ) -> list[Booking]:
        # Half-open intervals: [a, b) and [c, d) intersect iff a < d and c < b
        query = select(Booking).where(
            Booking.booking_type == booking_type,
            Booking.reference_id == resource_id,
            Booking.status.in_(list(statuses)),
            Booking.start_date < end,
            Booking.end_date > start,
        )
        if exclude_booking_id is not None:
            query = query.where(Booking.id != exclude_booking_id)
        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            raise await self._failed("query_overlap", e) from e
        return list(result.scalars().all())

    async def adjust_counter(
        self,
        model,
        row_id: str,
        column: str,
        delta: int,
        ceiling_column: Optional[str] = None,
    ) -> bool:
        counter = getattr(model, column)
        stmt = update(model).where(model.id == row_id)

        if delta < 0:
            stmt = stmt.where(counter >= -delta)
            if hasattr(model, "deleted_at"):
                stmt = stmt.where(model.deleted_at.is_(None))
            new_value = counter + delta
        elif ceiling_column is not None:
            ceiling = getattr(model, ceiling_column)
            new_value = case((counter + delta > ceiling, ceiling), else_=counter + delta)
        else:
            new_value = counter + delta

        stmt = stmt.values({column: new_value}).execution_options(synchronize_session=False)
        try:
            result = await self.session.execute(stmt)
            await self.session.commit()
        except SQLAlchemyError as e:
            raise await self._failed("adjust_counter", e) from e

        updated = result.rowcount == 1
        logger.debug(
            "counter_adjusted",
            table=model.__tablename__,
            row_id=row_id,
            column=column,
            delta=delta,
            updated=updated,
        )
        return updated
