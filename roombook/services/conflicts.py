"""Service for detecting overlapping reservations within a room."""

from __future__ import annotations

from collections.abc import Collection, Iterable
from datetime import datetime

from roombook.domain.models import Reservation


def find_conflicts(
    room_id: int,
    new_start: datetime,
    new_end: datetime,
    existing: Iterable[Reservation],
    exclude_ids: Collection[int] = (),
) -> list[Reservation]:
    """Return reservations in *room_id* that overlap the given time range.

    Bookings are half-open: a meeting ending at 10:00 leaves the room free for
    one starting at 10:00. Rows listed in *exclude_ids* are ignored, which is
    how an edit avoids clashing with the rows it is about to replace.
    """
    return [
        r
        for r in existing
        if r.room_id == room_id
        and r.id not in exclude_ids
        and r.end_time > new_start
        and r.start_time < new_end
    ]


def conflicts(
    room_id: int,
    new_start: datetime,
    new_end: datetime,
    existing: Iterable[Reservation],
    exclude_ids: Collection[int] = (),
) -> bool:
    return bool(find_conflicts(room_id, new_start, new_end, existing, exclude_ids))
