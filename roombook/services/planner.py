"""Service for turning a repeat rule into conflict-checked reservation rows."""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable, Sequence
from datetime import date, time

from roombook.domain.errors import BookingValidationError, ConflictError
from roombook.domain.models import (
    Cadence,
    EditPlan,
    Reservation,
    ReservationDraft,
    ReservationFields,
    SeriesInfo,
)
from roombook.services.clock import combine
from roombook.services.conflicts import find_conflicts

logger = logging.getLogger(__name__)


def _materialize(
    room_id: int,
    start_tod: time,
    end_tod: time,
    dates: Sequence[date],
    fields: ReservationFields,
    existing: Iterable[Reservation],
    exclude_ids: Collection[int],
) -> list[ReservationDraft]:
    if start_tod >= end_tod:
        raise BookingValidationError("End time must be later than start time.")

    existing = list(existing)
    drafts: list[ReservationDraft] = []
    for day in dates:
        start = combine(day, start_tod)
        end = combine(day, end_tod)
        clashes = find_conflicts(room_id, start, end, existing, exclude_ids)
        if clashes:
            logger.warning(
                "Room %s is taken on %s %s-%s by reservation(s) %s",
                room_id,
                day,
                start_tod,
                end_tod,
                [c.id for c in clashes],
            )
            raise ConflictError(day, start_tod, end_tod)
        drafts.append(
            ReservationDraft(
                room_id=room_id,
                start_time=start,
                end_time=end,
                **fields.model_dump(),
            )
        )
    return drafts


def plan_create(
    room_id: int,
    start_tod: time,
    end_tod: time,
    dates: Sequence[date],
    fields: ReservationFields,
    existing: Iterable[Reservation],
) -> list[ReservationDraft]:
    """Build one draft per date, or raise on the first conflicting date.

    Nothing is returned unless every occurrence is clear.
    """
    return _materialize(room_id, start_tod, end_tod, dates, fields, existing, ())


def plan_edit(
    series: SeriesInfo,
    start_tod: time,
    end_tod: time,
    dates: Sequence[date],
    fields: ReservationFields,
    existing: Iterable[Reservation],
) -> EditPlan:
    """Plan the replacement of *series* by a freshly expanded set of rows.

    The rows being replaced are excluded from the conflict check so a series
    never collides with itself.
    """
    if series.cadence == Cadence.NONE:
        to_delete = [series.members[0].id]
    else:
        to_delete = series.member_ids

    room_id = series.members[0].room_id
    to_create = _materialize(
        room_id, start_tod, end_tod, dates, fields, existing, set(to_delete)
    )
    return EditPlan(to_delete=to_delete, to_create=to_create)
