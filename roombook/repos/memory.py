"""In-memory table store for rooms and reservations.

Each repository stands in for one remote table: select, insert, update and
delete-by-filter. Every call, reads included, takes the store lock, so a batch
call applies fully or not at all. Linked repositories share one re-entrant
lock, as two tables share one database. Conflict rules are not enforced here.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Iterable

from pydantic import ValidationError

from roombook.domain.errors import RecordNotFound, StoreError
from roombook.domain.models import Reservation, ReservationDraft, Room

logger = logging.getLogger(__name__)


class RoomRepository:
    """Dict-backed store for Room rows, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[int, Room] = {}
        self._ids = itertools.count(1)
        self._lock = threading.RLock()
        self.reservations: ReservationRepository | None = None

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
            self._ids = itertools.count(1)

    def get(self, room_id: int) -> Room | None:
        with self._lock:
            return self._store.get(room_id)

    def list_all(self) -> list[Room]:
        with self._lock:
            rows = list(self._store.values())
        return sorted(rows, key=lambda r: (r.display_order, r.id))

    def list_active(self) -> list[Room]:
        return [r for r in self.list_all() if r.is_active]

    def insert(
        self,
        name: str,
        capacity: int | None,
        display_order: int,
        is_active: bool = True,
    ) -> Room:
        with self._lock:
            try:
                room = Room(
                    id=next(self._ids),
                    name=name,
                    capacity=capacity,
                    is_active=is_active,
                    display_order=display_order,
                )
            except ValidationError as exc:
                raise StoreError(f"rooms insert rejected: {exc}") from exc
            self._store[room.id] = room
            return room

    def update(self, room_id: int, **fields) -> Room:
        with self._lock:
            room = self._store.get(room_id)
            if room is None:
                raise RecordNotFound(f"Room {room_id} not found")
            try:
                updated = Room.model_validate({**room.model_dump(), **fields})
            except ValidationError as exc:
                raise StoreError(f"rooms update rejected: {exc}") from exc
            self._store[room_id] = updated
            return updated

    def delete(self, room_id: int) -> None:
        with self._lock:
            if room_id not in self._store:
                raise RecordNotFound(f"Room {room_id} not found")
            if self.reservations is not None and self.reservations.list_for_room(room_id):
                raise StoreError(
                    f'delete on table "rooms" violates foreign key constraint: '
                    f"room {room_id} is still referenced by reservations"
                )
            del self._store[room_id]


class ReservationRepository:
    """Dict-backed store for Reservation rows, keyed by id.

    When *rooms* is given, inserts referencing an unknown room are refused
    the way a foreign key would refuse them.
    """

    def __init__(self, rooms: RoomRepository | None = None) -> None:
        self._store: dict[int, Reservation] = {}
        self._ids = itertools.count(1)
        self._lock = rooms._lock if rooms is not None else threading.RLock()
        self.rooms = rooms
        if rooms is not None:
            rooms.reservations = self

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
            self._ids = itertools.count(1)

    def get(self, reservation_id: int) -> Reservation | None:
        with self._lock:
            return self._store.get(reservation_id)

    def list_all(self) -> list[Reservation]:
        with self._lock:
            rows = list(self._store.values())
        return sorted(rows, key=lambda r: (r.start_time, r.id))

    def list_for_room(self, room_id: int) -> list[Reservation]:
        return [r for r in self.list_all() if r.room_id == room_id]

    def _check_room(self, room_id: int) -> None:
        if self.rooms is not None and self.rooms.get(room_id) is None:
            raise StoreError(
                f'insert on table "reservations" violates foreign key constraint: '
                f"room {room_id} does not exist"
            )

    def _build(self, drafts: Iterable[ReservationDraft]) -> list[Reservation]:
        rows = []
        for draft in drafts:
            self._check_room(draft.room_id)
            rows.append(Reservation(id=next(self._ids), **draft.model_dump()))
        return rows

    def insert_many(self, drafts: Iterable[ReservationDraft]) -> list[Reservation]:
        with self._lock:
            rows = self._build(drafts)
            for row in rows:
                self._store[row.id] = row
            logger.debug("Inserted reservations %s", [r.id for r in rows])
            return rows

    def update(self, reservation_id: int, **fields) -> Reservation:
        with self._lock:
            current = self._store.get(reservation_id)
            if current is None:
                raise RecordNotFound(f"Reservation {reservation_id} not found")
            try:
                updated = Reservation.model_validate({**current.model_dump(), **fields})
            except ValidationError as exc:
                raise StoreError(f"reservations update rejected: {exc}") from exc
            self._check_room(updated.room_id)
            self._store[reservation_id] = updated
            return updated

    def delete(self, reservation_id: int) -> None:
        with self._lock:
            if self._store.pop(reservation_id, None) is None:
                raise RecordNotFound(f"Reservation {reservation_id} not found")

    def delete_many(self, reservation_ids: Iterable[int]) -> int:
        """Delete every listed row; unknown ids are skipped, as ``in`` filters do."""
        with self._lock:
            removed = 0
            for rid in set(reservation_ids):
                if self._store.pop(rid, None) is not None:
                    removed += 1
            return removed

    def replace(
        self, reservation_ids: Iterable[int], drafts: Iterable[ReservationDraft]
    ) -> list[Reservation]:
        """Delete *reservation_ids* and insert *drafts* as one batch.

        The new rows are built before anything is removed, so a rejected
        insert leaves the old rows in place.
        """
        with self._lock:
            rows = self._build(drafts)
            for rid in set(reservation_ids):
                self._store.pop(rid, None)
            for row in rows:
                self._store[row.id] = row
            return rows


# ---------------------------------------------------------------------------
# Seed data: a small floor of rooms
# ---------------------------------------------------------------------------


def seed_rooms(repo: RoomRepository) -> None:
    repo.insert(name="Room A", capacity=6, display_order=1)
    repo.insert(name="Room B", capacity=8, display_order=2)
    repo.insert(name="Board Room", capacity=12, display_order=3)


def create_repositories() -> tuple[RoomRepository, ReservationRepository]:
    """Return linked room and reservation repositories."""
    rooms = RoomRepository()
    reservations = ReservationRepository(rooms)
    return rooms, reservations
