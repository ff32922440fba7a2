"""
Resource Store interface.

Everything the booking workflows read or write goes through this seam, so
the workflows can be exercised against any implementation (SQL in
production, failure-injecting subclasses in tests).

Every method raises StoreError when the backend fails; "not found" is a
normal return value (None / False), never an exception.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional, Sequence, TypeVar

from wayfare.models.booking import Booking

ModelT = TypeVar("ModelT")


class ResourceStore(ABC):

    @abstractmethod
    async def fetch_one(
        self,
        model: type[ModelT],
        row_id: str,
        exclude_soft_deleted: bool = True,
    ) -> Optional[ModelT]:
        """Fetch a row by primary key, fresh from the backend."""

    @abstractmethod
    async def find_one(self, model: type[ModelT], **criteria: Any) -> Optional[ModelT]:
        """Fetch the first row whose columns equal the given values."""

    @abstractmethod
    async def insert(self, obj: ModelT) -> ModelT:
        """Persist a new row and return it with generated fields populated."""

    @abstractmethod
    async def find_many(
        self,
        model: type[ModelT],
        order_by: Optional[str] = None,
        descending: bool = False,
        **criteria: Any,
    ) -> list[ModelT]:
        """All rows whose columns equal the given values."""

    @abstractmethod
    async def update(
        self,
        model: type[ModelT],
        row_id: str,
        patch: dict[str, Any],
        **expected: Any,
    ) -> Optional[ModelT]:
        """
        Apply `patch` to one row, only if its columns still equal `expected`.
        Returns None if no row matched.
        """

    @abstractmethod
    async def delete(self, model: type, row_id: str, **criteria: Any) -> bool:
        """Delete one row (optionally scoped by extra criteria). True if a row was removed."""

    @abstractmethod
    async def query_overlap(
        self,
        booking_type: str,
        resource_id: str,
        start: datetime,
        end: datetime,
        statuses: Sequence[str],
        exclude_booking_id: Optional[str] = None,
    ) -> list[Booking]:
        """
        Bookings of one resource whose [start_date, end_date) intersects
        [start, end) and whose status is in `statuses`.
        """

    @abstractmethod
    async def adjust_counter(
        self,
        model: type,
        row_id: str,
        column: str,
        delta: int,
        ceiling_column: Optional[str] = None,
    ) -> bool:
        """
        Atomically add `delta` to an integer column.

        Negative deltas only apply when the counter stays >= 0 and the row is
        not soft-deleted; positive deltas are capped at `ceiling_column`.
        Returns False when no row was updated.
        """
