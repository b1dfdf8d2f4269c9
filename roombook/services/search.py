"""Service for searching reservations by title, reserver or team."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from operator import attrgetter

from roombook import config
from roombook.domain.models import (
    Reservation,
    Room,
    SearchBadge,
    SearchHit,
    SearchResult,
)
from roombook.services.clock import local_date


def filter_reservations(reservations: Iterable[Reservation], query: str) -> list[Reservation]:
    """Case-insensitive substring match; a blank query matches everything."""
    if not query.strip():
        return list(reservations)

    q = query.lower()
    return [
        r
        for r in reservations
        if q in (r.title or "").lower()
        or q in (r.reserver_name or "").lower()
        or q in (r.reserver_team or "").lower()
    ]


def badge_for(r: Reservation, today: date) -> SearchBadge:
    day = local_date(r.start_time)
    if day == today:
        return SearchBadge.TODAY
    if day > today:
        return SearchBadge.UPCOMING
    return SearchBadge.PAST


def order_for_search(reservations: Iterable[Reservation], today: date) -> list[Reservation]:
    """Today's first, then upcoming, both earliest first; past ones last,
    most recent first."""
    buckets: dict[SearchBadge, list[Reservation]] = {badge: [] for badge in SearchBadge}
    for r in reservations:
        buckets[badge_for(r, today)].append(r)

    by_start = attrgetter("start_time")
    return (
        sorted(buckets[SearchBadge.TODAY], key=by_start)
        + sorted(buckets[SearchBadge.UPCOMING], key=by_start)
        + sorted(buckets[SearchBadge.PAST], key=by_start, reverse=True)
    )


def search(
    reservations: Iterable[Reservation],
    rooms: Iterable[Room],
    query: str,
    today: date,
    show_all: bool = False,
) -> SearchResult:
    if not query.strip():
        return SearchResult(query=query, total=0, hidden=0)

    room_names = {room.id: room.name for room in rooms}
    ordered = order_for_search(filter_reservations(reservations, query), today)
    shown = ordered if show_all else ordered[: config.SEARCH_LIMIT]
    return SearchResult(
        query=query,
        total=len(ordered),
        hidden=len(ordered) - len(shown),
        hits=[
            SearchHit(
                reservation=r,
                room_name=room_names.get(r.room_id),
                badge=badge_for(r, today),
            )
            for r in shown
        ],
    )
