"""Service for the create / edit / cancel booking workflow.

Every write follows the same pattern: validate the form, load the full
reservation snapshot, plan against it with the pure planner functions, then
apply the plan through the reservation repository in one call.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time

from roombook import config
from roombook.domain.errors import BookingValidationError, RecordNotFound
from roombook.domain.models import (
    Cadence,
    Reservation,
    ReservationFields,
    ReservationForm,
    Room,
)
from roombook.repos.memory import ReservationRepository, RoomRepository
from roombook.services.calendar import default_end_time, is_past_slot
from roombook.services.clock import local_date, local_time
from roombook.services.planner import plan_create, plan_edit
from roombook.services.recurrence import expand, infer_series

logger = logging.getLogger(__name__)


def validate_form(form: ReservationForm, now: datetime) -> None:
    """Raise ``BookingValidationError`` for the first problem found."""
    if not form.title.strip() or form.start_time is None or form.end_time is None:
        raise BookingValidationError("Title, start time and end time are required.")
    if form.start_date is None:
        raise BookingValidationError("Start date is required.")
    if form.repeat != Cadence.NONE and form.end_date is None:
        raise BookingValidationError("End date is required for a repeating booking.")

    if form.end_time <= form.start_time:
        raise BookingValidationError("End time must be later than start time.")
    for value in (form.start_time, form.end_time):
        if not config.DAY_START <= value <= config.DAY_END:
            raise BookingValidationError(
                f"Times must fall between {config.DAY_START:%H:%M} and "
                f"{config.DAY_END:%H:%M}."
            )

    if form.repeat != Cadence.NONE and form.end_date < form.start_date:
        raise BookingValidationError("End date must not be earlier than start date.")

    if is_past_slot(form.start_date, form.start_time, now):
        raise BookingValidationError("Cannot book a time that has already passed.")


def _fields(form: ReservationForm) -> ReservationFields:
    return ReservationFields(
        title=form.title.strip(),
        reserver_name=form.reserver_name,
        reserver_team=form.reserver_team,
        created_by=config.MANUAL_SOURCE,
    )


def _require_room(rooms: RoomRepository, room_id: int) -> Room:
    room = rooms.get(room_id)
    if room is None:
        raise RecordNotFound("Room not found")
    return room


def _require_reservation(reservations: ReservationRepository, reservation_id: int) -> Reservation:
    target = reservations.get(reservation_id)
    if target is None:
        raise RecordNotFound("Reservation not found")
    return target


def create_reservations(
    form: ReservationForm,
    rooms: RoomRepository,
    reservations: ReservationRepository,
    now: datetime,
) -> list[Reservation]:
    """Book every occurrence the form describes, or none of them."""
    validate_form(form, now)
    room = _require_room(rooms, form.room_id)

    dates = expand(form.start_date, form.end_date, form.repeat)
    drafts = plan_create(
        room.id,
        form.start_time,
        form.end_time,
        dates,
        _fields(form),
        reservations.list_all(),
    )
    created = reservations.insert_many(drafts)
    logger.info(
        "Booked %d occurrence(s) of %r in room %s (%s)",
        len(created),
        form.title,
        room.id,
        form.repeat,
    )
    return created


def edit_reservation(
    reservation_id: int,
    form: ReservationForm,
    rooms: RoomRepository,
    reservations: ReservationRepository,
    now: datetime,
) -> list[Reservation]:
    """Replace the reservation's inferred series (or the reservation alone)
    with the rows the form now describes."""
    target = _require_reservation(reservations, reservation_id)
    validate_form(form, now)
    _require_room(rooms, form.room_id)
    if form.room_id != target.room_id:
        raise BookingValidationError(
            "A booking cannot be moved to another room; cancel it and book again."
        )

    snapshot = reservations.list_all()
    series = infer_series(target, snapshot)
    dates = expand(form.start_date, form.end_date, form.repeat)
    plan = plan_edit(
        series, form.start_time, form.end_time, dates, _fields(form), snapshot
    )
    created = reservations.replace(plan.to_delete, plan.to_create)
    logger.info(
        "Replaced reservation(s) %s with %d occurrence(s)",
        plan.to_delete,
        len(created),
    )
    return created


def cancel_reservation(reservation_id: int, reservations: ReservationRepository) -> None:
    reservations.delete(reservation_id)
    logger.info("Cancelled reservation %s", reservation_id)


def cancel_series(reservation_id: int, reservations: ReservationRepository) -> list[int]:
    """Cancel every member of the reservation's inferred series."""
    target = _require_reservation(reservations, reservation_id)
    series = infer_series(target, reservations.list_all())
    reservations.delete_many(series.member_ids)
    logger.info("Cancelled %s series %s", series.cadence, series.member_ids)
    return series.member_ids


# ── Form pre-fill ─────────────────────────────────────────────────────


def prefill_form(room: Room, day: date, slot: time, now: datetime) -> ReservationForm:
    """The create form opened by clicking an empty grid cell."""
    if is_past_slot(day, slot, now):
        raise BookingValidationError("Cannot book a time that has already passed.")
    return ReservationForm(
        room_id=room.id,
        start_date=day,
        end_date=day,
        start_time=slot,
        end_time=default_end_time(slot),
        repeat=Cadence.NONE,
    )


def edit_form(target: Reservation, all_reservations: list[Reservation]) -> ReservationForm:
    """The edit form for *target*, with repeat settings taken from its series."""
    series = infer_series(target, all_reservations)
    return ReservationForm(
        room_id=target.room_id,
        title=target.title,
        reserver_name=target.reserver_name,
        reserver_team=target.reserver_team,
        start_date=local_date(target.start_time),
        end_date=series.last_date,
        start_time=local_time(target.start_time),
        end_time=local_time(target.end_time),
        repeat=series.cadence,
    )
