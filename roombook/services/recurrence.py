"""Service for inferring repeat series from stored reservations and expanding
repeat rules into concrete occurrence dates."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime

from dateutil.rrule import DAILY, WEEKLY, rrule

from roombook.domain.models import Cadence, Reservation, SeriesInfo
from roombook.services.clock import local, local_date

_FREQ = {Cadence.DAILY: DAILY, Cadence.WEEKLY: WEEKLY}
_STRIDE_DAYS = {Cadence.DAILY: 1, Cadence.WEEKLY: 7}


def expand(start_date: date, end_date: date | None, cadence: Cadence) -> list[date]:
    """Expand a repeat rule into the dates it covers, both ends inclusive.

    ``Cadence.NONE`` always yields ``[start_date]``; *end_date* is ignored.
    A repeating rule whose end precedes its start yields nothing.
    """
    if cadence == Cadence.NONE or end_date is None:
        return [start_date]

    rule = rrule(
        _FREQ[cadence],
        dtstart=datetime.combine(start_date, datetime.min.time()),
        until=datetime.combine(end_date, datetime.min.time()),
    )
    return [dt.date() for dt in rule]


def _series_key(r: Reservation) -> tuple:
    start = local(r.start_time)
    return (
        r.room_id,
        r.title,
        r.reserver_name,
        r.reserver_team,
        start.hour,
        start.minute,
    )


def find_matches(target: Reservation, all_reservations: Iterable[Reservation]) -> list[Reservation]:
    """Return every reservation sharing room, title, reserver, team and start
    time of day with *target*, ordered by start. *target* is always included."""
    key = _series_key(target)
    matches = [
        r for r in all_reservations if r.id == target.id or _series_key(r) == key
    ]
    if not any(r.id == target.id for r in matches):
        matches.append(target)
    return sorted(matches, key=lambda r: r.start_time)


def _cadence_of(dates: list[date]) -> Cadence:
    diffs = {(b - a).days for a, b in zip(dates, dates[1:])}
    for cadence, stride in _STRIDE_DAYS.items():
        if diffs == {stride}:
            return cadence
    return Cadence.NONE


def infer_series(target: Reservation, all_reservations: Iterable[Reservation]) -> SeriesInfo:
    """Work out whether *target* belongs to a daily or weekly series.

    Membership is a heuristic: two independent bookings that happen to share
    all five fields on consecutive dates are reported as a series. An
    irregular group is treated as unrelated, so edits then touch *target*
    alone; the field-equal rows are still listed in ``matches``.
    """
    matches = find_matches(target, all_reservations)
    dates = sorted({local_date(r.start_time) for r in matches})

    cadence = Cadence.NONE
    if len(matches) >= 2:
        cadence = _cadence_of(dates)

    if cadence == Cadence.NONE:
        day = local_date(target.start_time)
        return SeriesInfo(
            members=[target],
            matches=matches,
            cadence=cadence,
            first_date=day,
            last_date=day,
            count=1,
        )

    return SeriesInfo(
        members=matches,
        matches=matches,
        cadence=cadence,
        first_date=dates[0],
        last_date=dates[-1],
        count=len(matches),
    )
