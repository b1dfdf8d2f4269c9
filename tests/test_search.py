"""Tests for reservation search and its today / upcoming / past ordering."""

from __future__ import annotations

from datetime import date, time

from roombook.domain.models import Reservation, Room, SearchBadge
from roombook.services.clock import combine
from roombook.services.search import filter_reservations, order_for_search, search

TODAY = date(2024, 3, 4)
ROOMS = [Room(id=1, name="Room A", capacity=6, display_order=1)]


def _make_reservation(rid: int, day: date, start: time = time(9, 0), **overrides) -> Reservation:
    defaults = dict(
        id=rid,
        room_id=1,
        title="Design review",
        reserver_name="Lee",
        reserver_team="Platform",
        start_time=combine(day, start),
        end_time=combine(day, time(start.hour + 1, start.minute)),
    )
    defaults.update(overrides)
    return Reservation(**defaults)


def test_blank_query_matches_everything():
    rows = [_make_reservation(1, TODAY), _make_reservation(2, TODAY, title="Other")]
    assert filter_reservations(rows, "   ") == rows


def test_query_matches_title_name_or_team_case_insensitively():
    rows = [
        _make_reservation(1, TODAY, title="Budget Planning"),
        _make_reservation(2, TODAY, reserver_name="Park Budget"),
        _make_reservation(3, TODAY, reserver_team="budgeting"),
        _make_reservation(4, TODAY, title="Lunch"),
    ]
    assert [r.id for r in filter_reservations(rows, "BUDGET")] == [1, 2, 3]


def test_order_today_then_upcoming_then_recent_past():
    rows = [
        _make_reservation(1, date(2024, 3, 1)),
        _make_reservation(2, date(2024, 3, 10)),
        _make_reservation(3, TODAY, start=time(14, 0)),
        _make_reservation(4, date(2024, 2, 20)),
        _make_reservation(5, TODAY, start=time(9, 0)),
        _make_reservation(6, date(2024, 3, 5)),
    ]
    ordered = order_for_search(rows, TODAY)
    assert [r.id for r in ordered] == [5, 3, 6, 2, 1, 4]


def test_search_limits_to_ten_unless_show_all():
    rows = [_make_reservation(i, date(2024, 3, 4 + i)) for i in range(1, 13)]

    result = search(rows, ROOMS, "design", TODAY)
    assert result.total == 12
    assert len(result.hits) == 10
    assert result.hidden == 2

    everything = search(rows, ROOMS, "design", TODAY, show_all=True)
    assert len(everything.hits) == 12
    assert everything.hidden == 0


def test_search_hits_carry_room_name_and_badge():
    rows = [
        _make_reservation(1, TODAY),
        _make_reservation(2, date(2024, 3, 8)),
        _make_reservation(3, date(2024, 3, 1), room_id=9),
    ]
    result = search(rows, ROOMS, "review", TODAY)

    badges = {hit.reservation.id: hit.badge for hit in result.hits}
    assert badges == {
        1: SearchBadge.TODAY,
        2: SearchBadge.UPCOMING,
        3: SearchBadge.PAST,
    }
    assert result.hits[0].room_name == "Room A"
    assert result.hits[-1].room_name is None


def test_blank_search_returns_no_hits():
    result = search([_make_reservation(1, TODAY)], ROOMS, "", TODAY)
    assert result.total == 0
    assert result.hits == []
