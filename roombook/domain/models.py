"""Domain models for the room booking system."""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from enum import StrEnum

from pydantic import BaseModel, Field, model_validator


class Cadence(StrEnum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"


class SearchBadge(StrEnum):
    TODAY = "today"
    UPCOMING = "upcoming"
    PAST = "past"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Stored rows
# ---------------------------------------------------------------------------


class Room(BaseModel):
    id: int
    name: str
    capacity: int | None = Field(default=None, gt=0)
    is_active: bool = True
    display_order: int = 0
    created_at: datetime = Field(default_factory=_utcnow)


class ReservationDraft(BaseModel):
    """A reservation row that has not been stored yet."""

    room_id: int
    title: str
    reserver_name: str = ""
    reserver_team: str = ""
    start_time: datetime
    end_time: datetime
    created_by: str | None = None

    @model_validator(mode="after")
    def _end_after_start(self) -> ReservationDraft:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class Reservation(ReservationDraft):
    id: int


# ---------------------------------------------------------------------------
# Derived values
# ---------------------------------------------------------------------------


class SeriesInfo(BaseModel):
    """A recurring group inferred from field-equal reservations."""

    members: list[Reservation]
    matches: list[Reservation]
    cadence: Cadence
    first_date: date
    last_date: date
    count: int

    @property
    def member_ids(self) -> list[int]:
        return [r.id for r in self.members]


class EditPlan(BaseModel):
    to_delete: list[int]
    to_create: list[ReservationDraft]


class ReservationFields(BaseModel):
    """Descriptive fields copied onto every occurrence of a booking."""

    title: str
    reserver_name: str = ""
    reserver_team: str = ""
    created_by: str | None = None


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class ReservationForm(BaseModel):
    """The create/edit form. Required fields are checked by the booking service."""

    room_id: int
    title: str = ""
    reserver_name: str = ""
    reserver_team: str = ""
    start_date: date | None = None
    end_date: date | None = None
    start_time: time | None = None
    end_time: time | None = None
    repeat: Cadence = Cadence.NONE


class RoomCreateRequest(BaseModel):
    name: str
    capacity: int | None = None
    display_order: int | None = None


class RoomUpdateRequest(BaseModel):
    name: str | None = None
    capacity: int | None = Field(default=None, gt=0)
    is_active: bool | None = None
    display_order: int | None = None


class SeriesResponse(BaseModel):
    series: SeriesInfo
    description: str


class SearchHit(BaseModel):
    reservation: Reservation
    room_name: str | None = None
    badge: SearchBadge


class SearchResult(BaseModel):
    query: str
    total: int
    hidden: int
    hits: list[SearchHit] = Field(default_factory=list)


class CalendarBlock(BaseModel):
    reservation: Reservation
    anchor_slot: str
    offset_minutes: int
    duration_minutes: int
    is_past: bool


class RoomColumn(BaseModel):
    room: Room
    blocks: list[CalendarBlock] = Field(default_factory=list)


class DayView(BaseModel):
    day: date
    week: list[date]
    slots: list[str]
    columns: list[RoomColumn]
    now_marker: str | None = None


class ProfileResponse(BaseModel):
    display_name: str | None = None


class ProfileUpdateRequest(BaseModel):
    display_name: str
