"""Tests for the in-memory room and reservation tables."""

from __future__ import annotations

import threading
from datetime import date, time

import pytest

from roombook.domain.errors import RecordNotFound, StoreError
from roombook.domain.models import ReservationDraft
from roombook.repos.memory import create_repositories
from roombook.services.clock import combine

DAY = date(2024, 1, 1)


@pytest.fixture()
def repos():
    rooms, reservations = create_repositories()
    rooms.insert(name="Room A", capacity=6, display_order=1)
    rooms.insert(name="Room B", capacity=8, display_order=2)
    return rooms, reservations


def _draft(room_id: int = 1, start=time(9, 0), end=time(10, 0), **overrides) -> ReservationDraft:
    defaults = dict(
        room_id=room_id,
        title="Weekly sync",
        reserver_name="Kim",
        reserver_team="Ops",
        start_time=combine(DAY, start),
        end_time=combine(DAY, end),
    )
    defaults.update(overrides)
    return ReservationDraft(**defaults)


# ---------------------------------------------------------------------------
# ReservationRepository.update
# ---------------------------------------------------------------------------


def test_update_changes_only_the_given_fields(repos):
    _, reservations = repos
    (row,) = reservations.insert_many([_draft()])

    updated = reservations.update(row.id, title="Retro", end_time=combine(DAY, time(11, 0)))

    assert updated.id == row.id
    assert updated.title == "Retro"
    assert updated.reserver_name == "Kim"
    assert reservations.get(row.id).end_time == combine(DAY, time(11, 0))


def test_update_unknown_reservation(repos):
    _, reservations = repos
    with pytest.raises(RecordNotFound):
        reservations.update(99, title="Retro")


def test_update_rejects_inverted_times(repos):
    _, reservations = repos
    (row,) = reservations.insert_many([_draft()])

    with pytest.raises(StoreError):
        reservations.update(row.id, end_time=combine(DAY, time(8, 0)))
    assert reservations.get(row.id) == row


def test_update_rejects_unknown_room(repos):
    _, reservations = repos
    (row,) = reservations.insert_many([_draft()])

    with pytest.raises(StoreError, match="foreign key"):
        reservations.update(row.id, room_id=42)
    assert reservations.get(row.id).room_id == 1


# ---------------------------------------------------------------------------
# Batches and foreign keys
# ---------------------------------------------------------------------------


def test_insert_many_is_all_or_nothing(repos):
    _, reservations = repos
    with pytest.raises(StoreError):
        reservations.insert_many([_draft(), _draft(room_id=42)])
    assert reservations.list_all() == []


def test_replace_keeps_old_rows_when_insert_is_refused(repos):
    _, reservations = repos
    old = reservations.insert_many([_draft()])

    with pytest.raises(StoreError):
        reservations.replace([old[0].id], [_draft(room_id=42)])
    assert reservations.list_all() == old


def test_room_with_reservations_cannot_be_deleted(repos):
    rooms, reservations = repos
    reservations.insert_many([_draft(room_id=2)])

    with pytest.raises(StoreError, match="foreign key"):
        rooms.delete(2)
    rooms.delete(1)
    assert [r.name for r in rooms.list_all()] == ["Room B"]


# ---------------------------------------------------------------------------
# Concurrent access
# ---------------------------------------------------------------------------


def test_reads_while_another_thread_writes(repos):
    rooms, reservations = repos
    errors = []
    done = threading.Event()

    def writer():
        try:
            for i in range(200):
                start = time(8 + i % 10, 0)
                end = time(start.hour, 30)
                rows = reservations.insert_many([_draft(start=start, end=end)])
                reservations.replace([rows[0].id], [_draft(room_id=2, start=start, end=end)])
        except Exception as exc:
            errors.append(exc)
        finally:
            done.set()

    thread = threading.Thread(target=writer)
    thread.start()
    while not done.is_set():
        reservations.list_all()
        reservations.list_for_room(2)
        rooms.list_active()
    thread.join(timeout=10)

    assert not thread.is_alive()
    assert errors == []
    assert len(reservations.list_for_room(2)) == 200
