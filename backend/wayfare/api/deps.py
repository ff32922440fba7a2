"""
Shared route dependencies and the error envelope.
"""

from fastapi import Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from wayfare.core.exceptions import ErrorCode
from wayfare.db.session import get_db
from wayfare.infrastructure.sql_store import SqlAlchemyResourceStore
from wayfare.schemas.error import ErrorResponse
from wayfare.services.interfaces.store import ResourceStore
from wayfare.services.results import ServiceError

ERROR_STATUS = {
    ErrorCode.RESOURCE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.BOOKING_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.ITEM_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INSUFFICIENT_CAPACITY: status.HTTP_409_CONFLICT,
    ErrorCode.SOLD_OUT: status.HTTP_409_CONFLICT,
    ErrorCode.NOT_AVAILABLE: status.HTTP_409_CONFLICT,
    ErrorCode.ALREADY_SAVED: status.HTTP_409_CONFLICT,
    ErrorCode.CANNOT_CANCEL: status.HTTP_409_CONFLICT,
    ErrorCode.CANNOT_MODIFY: status.HTTP_409_CONFLICT,
    ErrorCode.INVALID_STATUS_TRANSITION: status.HTTP_409_CONFLICT,
    # The 422 constant name differs across Starlette versions
    ErrorCode.EXCEEDS_CAPACITY: 422,
    ErrorCode.INVALID_DATE_RANGE: 422,
    ErrorCode.AVAILABILITY_CHECK_FAILED: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.FETCH_FAILED: status.HTTP_503_SERVICE_UNAVAILABLE,
}

# Error codes documented on every route that runs a workflow operation
ERROR_RESPONSES = {
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    422: {"model": ErrorResponse, "description": "Request rejected by validation or capacity rules"},
    500: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


async def get_store(db: AsyncSession = Depends(get_db)) -> ResourceStore:
    return SqlAlchemyResourceStore(db)


def error_response(error: ServiceError) -> JSONResponse:
    status_code = ERROR_STATUS.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    body = ErrorResponse(error=error.to_dict())
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))
