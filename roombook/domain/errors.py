"""Error taxonomy for booking operations.

Every error is terminal for the action that raised it; nothing retries.
"""

from __future__ import annotations

from datetime import date, time


class BookingError(Exception):
    """Base class for all booking failures."""


class BookingValidationError(BookingError):
    """Input was rejected before any conflict check or write."""


class ConflictError(BookingError):
    """An occurrence overlaps an existing reservation in the same room."""

    def __init__(self, day: date, start: time, end: time) -> None:
        self.day = day
        self.start = start
        self.end = end
        super().__init__(
            f"{day.isoformat()} {start:%H:%M}~{end:%H:%M} is already booked "
            "in this room. Please choose another time."
        )


class RecordNotFound(BookingError):
    """A room or reservation id does not exist in the store."""


class StoreError(BookingError):
    """The table store refused or failed an operation."""


class BusyError(BookingError):
    """A write for the same entity is still outstanding."""
