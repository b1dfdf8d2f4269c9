"""Booking dialog state machine.

One explicit object holds everything the booking dialog needs: its mode, the
form being edited, the reservation being viewed, and the last error.

    closed -> creating -> validated -> submitted -> closed
                       +-> conflict -> creating
    closed -> viewing -> editing -> validated -> submitted -> closed
                                 +-> conflict -> editing

``cancel`` returns to ``closed`` from any state and discards the form.
``history`` lists the states of the current session and starts over on each
open.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time
from enum import StrEnum

from roombook.domain.errors import BookingValidationError, ConflictError
from roombook.domain.models import Reservation, ReservationForm, Room
from roombook.repos.memory import ReservationRepository, RoomRepository
from roombook.services import booking

logger = logging.getLogger(__name__)


class DialogState(StrEnum):
    CLOSED = "closed"
    CREATING = "creating"
    VIEWING = "viewing"
    EDITING = "editing"
    VALIDATED = "validated"
    SUBMITTED = "submitted"
    CONFLICT = "conflict"


class InvalidTransition(Exception):
    pass


class BookingDialog:
    def __init__(self, rooms: RoomRepository, reservations: ReservationRepository) -> None:
        self.rooms = rooms
        self.reservations = reservations
        self.history: list[DialogState] = []
        self._reset()

    def _reset(self) -> None:
        self.state = DialogState.CLOSED
        self.form: ReservationForm | None = None
        self.selected: Reservation | None = None
        self.error: str | None = None

    def _move(self, new_state: DialogState) -> None:
        self.history.append(new_state)
        self.state = new_state

    def _expect(self, *states: DialogState) -> None:
        if self.state not in states:
            raise InvalidTransition(f"Cannot do that while {self.state}")

    # ------------------------------------------------------------------
    # Opening
    # ------------------------------------------------------------------

    def open_create(self, room: Room, day: date, slot: time, now: datetime) -> ReservationForm:
        self._expect(DialogState.CLOSED)
        self.history = []
        form = booking.prefill_form(room, day, slot, now)
        self.form = form
        self._move(DialogState.CREATING)
        return form

    def open_view(self, reservation: Reservation) -> None:
        self._expect(DialogState.CLOSED)
        self.history = []
        self.selected = reservation
        self._move(DialogState.VIEWING)

    def begin_edit(self) -> ReservationForm:
        self._expect(DialogState.VIEWING)
        self.form = booking.edit_form(self.selected, self.reservations.list_all())
        self._move(DialogState.EDITING)
        return self.form

    def update(self, **fields) -> ReservationForm:
        """Change form fields while creating or editing."""
        self._expect(DialogState.CREATING, DialogState.EDITING)
        self.form = self.form.model_copy(update=fields)
        return self.form

    # ------------------------------------------------------------------
    # Closing
    # ------------------------------------------------------------------

    def submit(self, now: datetime) -> list[Reservation]:
        """Validate, plan and write. Returns the stored rows on success.

        Validation errors keep the current mode; conflicts pass through
        ``conflict`` back to it. Either way the message is kept in ``error``
        and the exception propagates.
        """
        self._expect(DialogState.CREATING, DialogState.EDITING)
        origin = self.state
        try:
            booking.validate_form(self.form, now)
        except BookingValidationError as exc:
            self.error = str(exc)
            raise
        self._move(DialogState.VALIDATED)

        try:
            if origin == DialogState.EDITING:
                rows = booking.edit_reservation(
                    self.selected.id, self.form, self.rooms, self.reservations, now
                )
            else:
                rows = booking.create_reservations(
                    self.form, self.rooms, self.reservations, now
                )
        except ConflictError as exc:
            self.error = str(exc)
            self._move(DialogState.CONFLICT)
            self._move(origin)
            raise
        except Exception as exc:
            self.error = str(exc)
            self._move(origin)
            raise

        self._move(DialogState.SUBMITTED)
        self._reset()
        self.history.append(DialogState.CLOSED)
        return rows

    def cancel(self) -> None:
        if self.state != DialogState.CLOSED:
            logger.debug("Booking dialog cancelled from %s", self.state)
        self._reset()
        self.history.append(DialogState.CLOSED)
