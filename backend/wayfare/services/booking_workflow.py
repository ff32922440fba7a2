"""
Booking workflow: create and cancel bookings of capacity-bounded resources.

CREATE (order matters, it encodes the failure policy)
=====================================================

  1. Fetch the resource (soft-deleted rows excluded)   -> RESOURCE_NOT_FOUND
  2. Static ceiling check (max guests / total seats)    -> EXCEEDS_CAPACITY
  3. Availability check against committed state         -> SOLD_OUT /
                                                           INSUFFICIENT_CAPACITY /
                                                           NOT_AVAILABLE
  4. Price calculation
  5. Insert the booking as `pending`                    -> BOOKING_FAILED
  6. Reserve capacity (policy.reserve)                  -> compensate, then
                                                           CAPACITY_UPDATE_FAILED or
                                                           the availability code

Steps 5 and 6 are two separate writes. If step 6 fails, the booking row
from step 5 is deleted before the error is returned, so no booking ever
exists without its capacity. Step 3 is advisory (fast rejection); the
authoritative check is the conditional write in step 6.

CANCEL
======

  1. Ownership-scoped fetch                              -> BOOKING_NOT_FOUND
  2. Reject terminal statuses                            -> CANNOT_CANCEL
  3. Mark cancelled (compare-and-swap on the old status) -> CANCELLATION_FAILED
  4. Give capacity back

Step 4 cannot be compensated by un-cancelling: the user asked to cancel and
the booking stays cancelled. The restore is retried a few times; if it still
fails the event is logged as `capacity_restore_failed` (with everything needed
to reconcile by hand) and counted in `capacity_restore_failures_total`.
The loss is in the safe direction (fewer sellable spots, never overbooking).
"""

import time
from typing import Optional

from wayfare.core.config import get_settings
from wayfare.core.exceptions import (
    BookingFailed,
    BookingNotFound,
    BookingServiceError,
    CancellationFailed,
    CannotCancel,
    FetchFailed,
    ResourceNotFound,
    StoreError,
)
from wayfare.core.logging import get_logger
from wayfare.core.metrics import (
    booking_latency,
    record_booking_attempt,
    record_cancellation,
    record_capacity_restore_failure,
    record_compensation,
)
from wayfare.db.base import utcnow
from wayfare.models.booking import Booking, BookingStatus
from wayfare.services.capacity_policies import get_policy, raise_unavailable
from wayfare.services.interfaces.capacity import BookingRequest, CapacityPolicy
from wayfare.services.interfaces.store import ResourceStore
from wayfare.services.pricing import as_utc
from wayfare.services.results import OperationResult, returns_result

logger = get_logger(__name__)


class BookingWorkflow:

    def __init__(self, store: ResourceStore, restore_attempts: Optional[int] = None):
        self.store = store
        if restore_attempts is None:
            restore_attempts = get_settings().CAPACITY_RESTORE_ATTEMPTS
        self.restore_attempts = restore_attempts

    # Create

    @returns_result
    async def create_booking(self, user_id: str, request: BookingRequest) -> Booking:
        started = time.perf_counter()
        try:
            booking = await self._create(user_id, request)
        except BookingServiceError as e:
            record_booking_attempt(request.booking_type, e.code.value)
            logger.warning(
                "booking_rejected",
                booking_type=request.booking_type,
                resource_id=request.resource_id,
                user_id=user_id,
                code=e.code.value,
                reason=e.message,
            )
            raise
        finally:
            booking_latency.labels(booking_type=request.booking_type).observe(
                time.perf_counter() - started
            )

        record_booking_attempt(request.booking_type, "success")
        logger.info(
            "booking_created",
            booking_id=booking.id,
            booking_type=booking.booking_type,
            resource_id=booking.reference_id,
            user_id=user_id,
            quantity=booking.guests,
            total_price=str(booking.total_price),
        )
        return booking

    async def _create(self, user_id: str, request: BookingRequest) -> Booking:
        policy = self._policy_for(request.booking_type)

        # 1. Resource
        try:
            resource = await self.store.fetch_one(policy.model, request.resource_id)
        except StoreError as e:
            raise FetchFailed(details={"operation": e.operation}) from e
        if resource is None:
            raise ResourceNotFound(f"{policy.label} not found")

        # 2. Static ceiling, independent of current bookings
        policy.validate_request(resource, request)

        # 3. Availability
        availability = await policy.check_availability(self.store, resource, request)
        if not availability.available:
            raise_unavailable(availability, policy.label, policy.noun)

        # 4. Price
        total_price = policy.price_of(resource, request)
        start_date, end_date = policy.booking_window(resource, request)

        # 5. Booking row
        booking = Booking(
            user_id=user_id,
            booking_type=policy.booking_type,
            reference_id=resource.id,
            status=BookingStatus.PENDING.value,
            start_date=as_utc(start_date),
            end_date=as_utc(end_date) if end_date is not None else None,
            guests=request.quantity,
            total_price=total_price,
            currency=policy.currency_of(resource),
            special_requests=request.special_requests or None,
            extra=policy.metadata_of(request),
        )
        try:
            booking = await self.store.insert(booking)
        except StoreError as e:
            raise BookingFailed(details={"operation": e.operation}) from e

        # 6. Capacity, all-or-nothing with step 5
        try:
            await policy.reserve(self.store, resource, booking)
        except BookingServiceError as e:
            await self._compensate(booking, e)
            raise

        return booking

    async def _compensate(self, booking: Booking, reason: BookingServiceError) -> None:
        """Delete a booking whose capacity reservation failed."""
        try:
            await self.store.delete(Booking, booking.id)
        except StoreError as e:
            record_compensation(deleted=False)
            logger.error(
                "booking_compensation_failed",
                booking_id=booking.id,
                booking_type=booking.booking_type,
                resource_id=booking.reference_id,
                quantity=booking.guests,
                error=str(e),
            )
            reason.details = {**(reason.details or {}), "orphaned_booking_id": booking.id}
            return

        record_compensation(deleted=True)
        logger.warning(
            "booking_compensated",
            booking_id=booking.id,
            booking_type=booking.booking_type,
            resource_id=booking.reference_id,
            code=reason.code.value,
        )

    # Cancel

    @returns_result
    async def cancel_booking(
        self,
        booking_id: str,
        user_id: str,
        booking_type: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> Booking:
        criteria = {"id": booking_id, "user_id": user_id}
        if booking_type is not None:
            criteria["booking_type"] = booking_type
        try:
            booking = await self.store.find_one(Booking, **criteria)
        except StoreError as e:
            raise FetchFailed(details={"operation": e.operation}) from e
        # Absent and "not yours" look the same on purpose
        if booking is None:
            raise BookingNotFound()
        return await self.cancel(booking, reason)

    async def cancel(self, booking: Booking, reason: Optional[str] = None) -> Booking:
        """Cancel an already loaded booking. Raises BookingServiceError."""
        status = BookingStatus(booking.status)
        if status.is_terminal:
            record_cancellation(booking.booking_type, CannotCancel.code.value)
            raise CannotCancel(f"Cannot cancel booking with status: {status.value}")

        metadata = dict(booking.extra or {})
        if reason:
            metadata["cancellation_reason"] = reason
        patch = {
            "status": BookingStatus.CANCELLED.value,
            "cancelled_at": utcnow(),
            "extra": metadata or None,
        }
        try:
            cancelled = await self.store.update(Booking, booking.id, patch, status=status.value)
        except StoreError as e:
            record_cancellation(booking.booking_type, CancellationFailed.code.value)
            raise CancellationFailed(details={"operation": e.operation}) from e
        if cancelled is None:
            # Someone else moved the booking out of `status` first
            record_cancellation(booking.booking_type, CannotCancel.code.value)
            raise CannotCancel("Booking status changed while cancelling")

        await self._restore_capacity(cancelled)

        record_cancellation(booking.booking_type, "success")
        logger.info(
            "booking_cancelled",
            booking_id=cancelled.id,
            booking_type=cancelled.booking_type,
            resource_id=cancelled.reference_id,
            quantity_restored=cancelled.guests,
        )
        return cancelled

    async def _restore_capacity(self, booking: Booking) -> None:
        try:
            policy = get_policy(booking.booking_type)
        except KeyError:
            return

        for attempt in range(1, self.restore_attempts + 1):
            try:
                restored = await policy.release(self.store, booking)
            except StoreError as e:
                logger.warning(
                    "capacity_restore_retry",
                    booking_id=booking.id,
                    attempt=attempt,
                    error=str(e),
                )
                continue
            if not restored:
                logger.warning(
                    "capacity_restore_skipped",
                    booking_id=booking.id,
                    resource_id=booking.reference_id,
                    reason="resource_missing",
                )
            return

        record_capacity_restore_failure(booking.booking_type)
        logger.error(
            "capacity_restore_failed",
            booking_id=booking.id,
            booking_type=booking.booking_type,
            resource_id=booking.reference_id,
            quantity=booking.guests,
            attempts=self.restore_attempts,
        )

    @staticmethod
    def _policy_for(booking_type: str) -> CapacityPolicy:
        try:
            return get_policy(booking_type)
        except KeyError:
            raise BookingFailed(
                f"{booking_type} listings cannot be booked",
                details={"booking_type": booking_type},
            ) from None


async def create_booking(store: ResourceStore, user_id: str, request: BookingRequest) -> OperationResult[Booking]:
    return await BookingWorkflow(store).create_booking(user_id, request)


async def cancel_booking(
    store: ResourceStore,
    booking_id: str,
    user_id: str,
    booking_type: Optional[str] = None,
    reason: Optional[str] = None,
) -> OperationResult[Booking]:
    return await BookingWorkflow(store).cancel_booking(booking_id, user_id, booking_type, reason)
