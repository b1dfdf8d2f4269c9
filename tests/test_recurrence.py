"""Tests for series inference and repeat-rule expansion."""

from __future__ import annotations

from datetime import date, datetime, time, timezone

from roombook.domain.models import Cadence, Reservation
from roombook.services.clock import combine
from roombook.services.recurrence import expand, find_matches, infer_series


def _make_reservation(rid: int, day: date, **overrides) -> Reservation:
    defaults = dict(
        id=rid,
        room_id=1,
        title="Weekly sync",
        reserver_name="Kim",
        reserver_team="Ops",
        start_time=combine(day, time(9, 0)),
        end_time=combine(day, time(10, 0)),
    )
    defaults.update(overrides)
    return Reservation(**defaults)


# ---------------------------------------------------------------------------
# expand
# ---------------------------------------------------------------------------


def test_expand_daily_inclusive():
    assert expand(date(2024, 1, 1), date(2024, 1, 3), Cadence.DAILY) == [
        date(2024, 1, 1),
        date(2024, 1, 2),
        date(2024, 1, 3),
    ]


def test_expand_none_ignores_end_date():
    assert expand(date(2024, 1, 1), date(2024, 1, 1), Cadence.NONE) == [date(2024, 1, 1)]
    assert expand(date(2024, 1, 1), date(2024, 3, 1), Cadence.NONE) == [date(2024, 1, 1)]


def test_expand_weekly_steps_seven_days():
    dates = expand(date(2024, 1, 1), date(2024, 1, 20), Cadence.WEEKLY)
    assert dates == [date(2024, 1, 1), date(2024, 1, 8), date(2024, 1, 15)]


def test_expand_weekly_includes_end_when_on_stride():
    dates = expand(date(2024, 1, 1), date(2024, 1, 15), Cadence.WEEKLY)
    assert dates[-1] == date(2024, 1, 15)


def test_expand_crosses_month_end():
    dates = expand(date(2024, 1, 30), date(2024, 2, 2), Cadence.DAILY)
    assert dates == [
        date(2024, 1, 30),
        date(2024, 1, 31),
        date(2024, 2, 1),
        date(2024, 2, 2),
    ]


def test_expand_end_before_start_is_empty():
    assert expand(date(2024, 1, 5), date(2024, 1, 1), Cadence.DAILY) == []


# ---------------------------------------------------------------------------
# infer_series
# ---------------------------------------------------------------------------


def test_single_reservation_has_no_series():
    target = _make_reservation(1, date(2024, 1, 1))
    info = infer_series(target, [target])

    assert info.cadence == Cadence.NONE
    assert info.count == 1
    assert info.member_ids == [1]
    assert info.first_date == info.last_date == date(2024, 1, 1)


def test_consecutive_days_are_daily():
    rows = [
        _make_reservation(1, date(2024, 1, 1)),
        _make_reservation(2, date(2024, 1, 2)),
        _make_reservation(3, date(2024, 1, 3)),
    ]
    info = infer_series(rows[1], rows)

    assert info.cadence == Cadence.DAILY
    assert info.count == 3
    assert info.first_date == date(2024, 1, 1)
    assert info.last_date == date(2024, 1, 3)
    assert info.member_ids == [1, 2, 3]


def test_seven_day_stride_is_weekly():
    rows = [
        _make_reservation(1, date(2024, 1, 1)),
        _make_reservation(2, date(2024, 1, 8)),
        _make_reservation(3, date(2024, 1, 15)),
    ]
    info = infer_series(rows[0], rows)

    assert info.cadence == Cadence.WEEKLY
    assert info.count == 3
    assert info.last_date == date(2024, 1, 15)


def test_mixed_gaps_are_not_a_series():
    rows = [
        _make_reservation(1, date(2024, 1, 1)),
        _make_reservation(2, date(2024, 1, 2)),
        _make_reservation(3, date(2024, 1, 15)),
    ]
    info = infer_series(rows[0], rows)

    assert info.cadence == Cadence.NONE
    assert info.count == 1
    assert info.member_ids == [1]
    # the field-equal rows are still reported
    assert [r.id for r in info.matches] == [1, 2, 3]


def test_differing_fields_break_the_series():
    rows = [
        _make_reservation(1, date(2024, 1, 1)),
        _make_reservation(2, date(2024, 1, 2), reserver_team="Finance"),
        _make_reservation(3, date(2024, 1, 3), room_id=2),
        _make_reservation(
            4,
            date(2024, 1, 4),
            start_time=combine(date(2024, 1, 4), time(9, 30)),
            end_time=combine(date(2024, 1, 4), time(10, 30)),
        ),
        _make_reservation(5, date(2024, 1, 5), title="Other"),
    ]
    assert find_matches(rows[0], rows) == [rows[0]]
    assert infer_series(rows[0], rows).cadence == Cadence.NONE


def test_time_of_day_compared_at_fixed_offset():
    """09:00+09:00 and 00:00Z are the same local start."""
    local = _make_reservation(1, date(2024, 1, 1))
    utc = _make_reservation(
        2,
        date(2024, 1, 2),
        start_time=datetime(2024, 1, 2, 0, 0, tzinfo=timezone.utc),
        end_time=datetime(2024, 1, 2, 1, 0, tzinfo=timezone.utc),
    )
    info = infer_series(local, [local, utc])
    assert info.cadence == Cadence.DAILY
    assert info.count == 2


def test_target_missing_from_list_is_still_a_member():
    target = _make_reservation(1, date(2024, 1, 1))
    info = infer_series(target, [])
    assert info.member_ids == [1]
