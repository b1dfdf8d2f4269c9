"""FastAPI application: entry point for the room booking service."""

from __future__ import annotations

import logging
from datetime import date, time

import dateparser
from fastapi import FastAPI, HTTPException

from roombook import config
from roombook.domain.errors import (
    BookingError,
    BookingValidationError,
    BusyError,
    ConflictError,
    RecordNotFound,
    StoreError,
)
from roombook.domain.models import (
    DayView,
    ProfileResponse,
    ProfileUpdateRequest,
    Reservation,
    ReservationForm,
    Room,
    RoomCreateRequest,
    RoomUpdateRequest,
    SearchResult,
    SeriesResponse,
)
from roombook.repos.memory import create_repositories, seed_rooms
from roombook.repos.profile import ProfileRepository
from roombook.services import booking, clock
from roombook.services.calendar import build_day_view, describe_series
from roombook.services.recurrence import infer_series
from roombook.services.saving import SavingTracker
from roombook.services.search import search

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Meeting Room Booking Service")

# ── Singletons (created at import time for simplicity) ────────────────
room_repo, reservation_repo = create_repositories()
profile_repo = ProfileRepository(config.PROFILE_PATH)
saving = SavingTracker()

if config.SEED_SAMPLE_DATA:
    seed_rooms(room_repo)

_STATUS = {
    BookingValidationError: 400,
    RecordNotFound: 404,
    ConflictError: 409,
    BusyError: 409,
    StoreError: 502,
}


def _http_error(exc: BookingError) -> HTTPException:
    status = _STATUS.get(type(exc), 400)
    if status >= 500:
        logger.error("Store failure: %s", exc)
    return HTTPException(status_code=status, detail=str(exc))


def _get_room(room_id: int) -> Room:
    room = room_repo.get(room_id)
    if room is None:
        raise HTTPException(status_code=404, detail="Room not found")
    return room


def _get_reservation(reservation_id: int) -> Reservation:
    reservation = reservation_repo.get(reservation_id)
    if reservation is None:
        raise HTTPException(status_code=404, detail="Reservation not found")
    return reservation


def _parse_day(raw: str | None) -> date:
    """Accept ISO dates as well as phrases like "today" or "next monday"."""
    now = clock.now()
    if not raw:
        return now.date()
    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass
    parsed = dateparser.parse(
        raw,
        settings={
            "RELATIVE_BASE": now.replace(tzinfo=None),
            "PREFER_DAY_OF_MONTH": "first",
            "RETURN_AS_TIMEZONE_AWARE": False,
        },
    )
    if parsed is None:
        raise HTTPException(status_code=400, detail=f"Unrecognised date: {raw!r}")
    return parsed.date()


# ── Rooms ─────────────────────────────────────────────────────────────


@app.get("/rooms", response_model=list[Room])
def list_active_rooms() -> list[Room]:
    """Rooms shown on the calendar, in display order."""
    return room_repo.list_active()


@app.get("/admin/rooms", response_model=list[Room])
def list_rooms() -> list[Room]:
    return room_repo.list_all()


@app.post("/admin/rooms", response_model=Room, status_code=201)
def add_room(body: RoomCreateRequest) -> Room:
    if not body.name.strip():
        raise HTTPException(status_code=400, detail="Room name is required")
    if body.capacity is None or body.capacity <= 0:
        raise HTTPException(status_code=400, detail="Capacity must be a positive number")

    display_order = body.display_order
    if display_order is None:
        existing = room_repo.list_all()
        display_order = (existing[-1].display_order if existing else 0) + 1

    try:
        room = room_repo.insert(
            name=body.name.strip(), capacity=body.capacity, display_order=display_order
        )
    except BookingError as exc:
        raise _http_error(exc) from exc
    logger.info("Added room %s (%s)", room.id, room.name)
    return room


@app.patch("/admin/rooms/{room_id}", response_model=Room)
def save_room(room_id: int, body: RoomUpdateRequest) -> Room:
    _get_room(room_id)
    fields = body.model_dump(exclude_unset=True, exclude_none=True)
    try:
        with saving.saving(("room", room_id)):
            room = room_repo.update(room_id, **fields)
    except BookingError as exc:
        raise _http_error(exc) from exc
    logger.info("Saved room %s: %s", room_id, sorted(fields))
    return room


@app.post("/admin/rooms/{room_id}/toggle", response_model=Room)
def toggle_room(room_id: int) -> Room:
    room = _get_room(room_id)
    try:
        with saving.saving(("room", room_id)):
            updated = room_repo.update(room_id, is_active=not room.is_active)
    except BookingError as exc:
        raise _http_error(exc) from exc
    logger.info("Room %s active=%s", room_id, updated.is_active)
    return updated


@app.delete("/admin/rooms/{room_id}", status_code=200)
def delete_room(room_id: int) -> dict:
    _get_room(room_id)
    try:
        with saving.saving(("room", room_id)):
            room_repo.delete(room_id)
    except BookingError as exc:
        raise _http_error(exc) from exc
    logger.info("Deleted room %s", room_id)
    return {"status": "deleted"}


# ── Reservations ──────────────────────────────────────────────────────


@app.get("/reservations", response_model=list[Reservation])
def list_reservations() -> list[Reservation]:
    """Return every reservation, earliest first."""
    return reservation_repo.list_all()


@app.get("/reservations/search", response_model=SearchResult)
def search_reservations(q: str = "", show_all: bool = False) -> SearchResult:
    return search(
        reservation_repo.list_all(),
        room_repo.list_all(),
        q,
        today=clock.now().date(),
        show_all=show_all,
    )


@app.get("/reservations/{reservation_id}", response_model=Reservation)
def get_reservation(reservation_id: int) -> Reservation:
    return _get_reservation(reservation_id)


@app.get("/reservations/{reservation_id}/series", response_model=SeriesResponse)
def get_series(reservation_id: int) -> SeriesResponse:
    """Return the repeat series the reservation appears to belong to."""
    target = _get_reservation(reservation_id)
    info = infer_series(target, reservation_repo.list_all())
    return SeriesResponse(series=info, description=describe_series(info))


@app.get("/reservations/{reservation_id}/edit-form", response_model=ReservationForm)
def get_edit_form(reservation_id: int) -> ReservationForm:
    target = _get_reservation(reservation_id)
    return booking.edit_form(target, reservation_repo.list_all())


@app.post("/reservations", response_model=list[Reservation], status_code=201)
def create_reservation(form: ReservationForm) -> list[Reservation]:
    """Book a single reservation or a daily/weekly run, all or nothing."""
    try:
        return booking.create_reservations(form, room_repo, reservation_repo, clock.now())
    except BookingError as exc:
        raise _http_error(exc) from exc


@app.put("/reservations/{reservation_id}", response_model=list[Reservation])
def update_reservation(reservation_id: int, form: ReservationForm) -> list[Reservation]:
    """Replace the reservation (or its whole inferred series) with the form."""
    try:
        with saving.saving(("reservation", reservation_id)):
            return booking.edit_reservation(
                reservation_id, form, room_repo, reservation_repo, clock.now()
            )
    except BookingError as exc:
        raise _http_error(exc) from exc


@app.delete("/reservations/{reservation_id}", status_code=200)
def delete_reservation(reservation_id: int, series: bool = False) -> dict:
    try:
        with saving.saving(("reservation", reservation_id)):
            if series:
                removed = booking.cancel_series(reservation_id, reservation_repo)
            else:
                booking.cancel_reservation(reservation_id, reservation_repo)
                removed = [reservation_id]
    except BookingError as exc:
        raise _http_error(exc) from exc
    return {"status": "cancelled", "reservation_ids": removed}


# ── Calendar ──────────────────────────────────────────────────────────


@app.get("/calendar", response_model=DayView)
def get_calendar(date: str | None = None, q: str = "") -> DayView:
    """Day grid for the active rooms, with the Monday-Friday week around it."""
    day = _parse_day(date)
    return build_day_view(
        day,
        room_repo.list_active(),
        reservation_repo.list_all(),
        clock.now(),
        query=q,
    )


@app.get("/calendar/new", response_model=ReservationForm)
def new_reservation_form(room_id: int, date: str, slot: time) -> ReservationForm:
    """Pre-filled create form for an empty grid cell."""
    room = _get_room(room_id)
    try:
        return booking.prefill_form(room, _parse_day(date), slot, clock.now())
    except BookingError as exc:
        raise _http_error(exc) from exc


# ── Profile ───────────────────────────────────────────────────────────


@app.get("/profile", response_model=ProfileResponse)
def get_profile() -> ProfileResponse:
    return ProfileResponse(display_name=profile_repo.get())


@app.put("/profile", response_model=ProfileResponse)
def set_profile(body: ProfileUpdateRequest) -> ProfileResponse:
    return ProfileResponse(display_name=profile_repo.set(body.display_name))


@app.delete("/profile", response_model=ProfileResponse)
def clear_profile() -> ProfileResponse:
    profile_repo.clear()
    return ProfileResponse(display_name=None)
