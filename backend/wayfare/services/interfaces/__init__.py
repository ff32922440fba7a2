"""
Service interfaces for dependency inversion.
Allows swapping implementations without changing business logic.
"""

from .capacity import Availability, BookingRequest, CapacityPolicy
from .store import ResourceStore

__all__ = ['Availability', 'BookingRequest', 'CapacityPolicy', 'ResourceStore']
