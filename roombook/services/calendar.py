"""Service for laying out the weekly calendar grid."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, time, timedelta

from roombook import config
from roombook.domain.models import (
    CalendarBlock,
    Cadence,
    DayView,
    Reservation,
    Room,
    RoomColumn,
    SeriesInfo,
)
from roombook.services.clock import (
    combine,
    fmt,
    from_minutes,
    local,
    local_date,
    minutes_of,
)
from roombook.services.search import filter_reservations

_CADENCE_LABELS = {Cadence.DAILY: "Daily", Cadence.WEEKLY: "Weekly"}


# ── Week navigation ───────────────────────────────────────────────────


def monday_of(day: date) -> date:
    return day - timedelta(days=day.weekday())


def week_days(day: date) -> list[date]:
    """Monday to Friday of the week containing *day*."""
    monday = monday_of(day)
    return [monday + timedelta(days=i) for i in range(5)]


def shift_week(day: date, weeks: int) -> date:
    return day + timedelta(weeks=weeks)


# ── Slots and pickers ─────────────────────────────────────────────────


def _steps(step_minutes: int) -> list[time]:
    first = minutes_of(config.DAY_START)
    last = minutes_of(config.DAY_END)
    return [from_minutes(m) for m in range(first, last + 1, step_minutes)]


def time_slots() -> list[time]:
    """Grid rows, DAY_START through DAY_END inclusive."""
    return _steps(config.SLOT_MINUTES)


def time_options() -> list[time]:
    """Values offered by the start/end time pickers."""
    return _steps(config.PICKER_MINUTES)


def is_past_slot(day: date, slot: time, now: datetime) -> bool:
    """True when *slot* on *day* started longer ago than the grace window."""
    grace = timedelta(minutes=config.PAST_GRACE_MINUTES)
    return combine(day, slot) + grace < now


def default_end_time(slot: time) -> time:
    end = min(
        minutes_of(slot) + config.SLOT_MINUTES,
        minutes_of(config.DAY_END),
    )
    return from_minutes(end)


# ── Day view ──────────────────────────────────────────────────────────


def _block_for(r: Reservation, now: datetime) -> CalendarBlock | None:
    first = minutes_of(config.DAY_START)
    last = minutes_of(config.DAY_END)
    start_min = minutes_of(local(r.start_time).time())
    if not first <= start_min <= last:
        return None

    anchor = first + (start_min - first) // config.SLOT_MINUTES * config.SLOT_MINUTES
    duration = int((r.end_time - r.start_time).total_seconds() // 60)
    return CalendarBlock(
        reservation=r,
        anchor_slot=fmt(from_minutes(anchor)),
        offset_minutes=start_min - anchor,
        duration_minutes=duration,
        is_past=r.end_time < now,
    )


def build_day_view(
    day: date,
    rooms: Iterable[Room],
    reservations: Iterable[Reservation],
    now: datetime,
    query: str = "",
) -> DayView:
    """Lay out *day* as one column per room.

    Each reservation starting on *day* is anchored to the slot containing its
    start. A search *query* narrows the blocks shown.
    """
    visible = [
        r
        for r in filter_reservations(reservations, query)
        if local_date(r.start_time) == day
    ]

    columns = []
    for room in rooms:
        blocks = []
        for r in visible:
            if r.room_id != room.id:
                continue
            block = _block_for(r, now)
            if block is not None:
                blocks.append(block)
        columns.append(RoomColumn(room=room, blocks=blocks))

    now_marker = None
    local_now = local(now)
    if local_now.date() == day and config.DAY_START <= local_now.time() < config.DAY_END:
        now_marker = fmt(local_now.time())

    return DayView(
        day=day,
        week=week_days(day),
        slots=[fmt(s) for s in time_slots()],
        columns=columns,
        now_marker=now_marker,
    )


def describe_series(info: SeriesInfo) -> str:
    """Human-readable repeat summary, e.g. ``Daily · 1/1 ~ 1/3 · 3 occurrences``."""
    if len(info.matches) <= 1:
        return "None"

    dates = sorted(local_date(r.start_time) for r in info.matches)
    label = _CADENCE_LABELS.get(info.cadence, "Multiple dates")
    span = f"{dates[0].month}/{dates[0].day} ~ {dates[-1].month}/{dates[-1].day}"
    return f"{label} · {span} · {len(info.matches)} occurrences"
