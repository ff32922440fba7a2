"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter

from wayfare.api.routes import bookings, listings, saved

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(bookings.router)
api_router.include_router(saved.router)
api_router.include_router(listings.router)
