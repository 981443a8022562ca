"""Public interface for the website bookings adapter."""

from __future__ import annotations

from .client import BookingSourceError, SupabaseBookingSource
from .schema import BookingRow
from .translator import parse_booking, to_booking_submission

__all__ = [
    "BookingRow",
    "BookingSourceError",
    "SupabaseBookingSource",
    "parse_booking",
    "to_booking_submission",
]
