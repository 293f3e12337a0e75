"""
Reservation / notification-request matching.

A reservation and a standing request match when their date, restaurant and
branch each match. A ``None`` field is a wildcard. Flexible requests also
accept a reservation whose time lies strictly within the flexible window
around the request's target time. Callers pre-filter candidates on party
size through the store query, so ``matches`` never looks at it.
"""
from __future__ import annotations

import logging
from datetime import timedelta
from functools import partial

from ..config import DEFAULT_ENGINE_CONFIG, EngineConfig
from ..dates import display_date, parse_date
from ..models import NotificationPayload, NotificationRequest, Reservation, parse_records
from ..notify.base import Notifier
from ..store.base import NOTIFICATION_REQUESTS, RESERVATIONS, Store
from .fanout import run_all

logger = logging.getLogger(__name__)

NEW_RESERVATION_TITLE = "It's a match!"
EXISTING_RESERVATION_TITLE = "A matching reservation exists"


def _field_matches(reservation_value: str | None, request_value: str | None) -> bool:
    return reservation_value is None or request_value is None or reservation_value == request_value


def date_matches(reservation: Reservation, request: NotificationRequest, window_hours: float = 2) -> bool:
    if _field_matches(reservation.date, request.date):
        return True
    if not request.flexible:
        return False
    try:
        reservation_at = parse_date(reservation.date)
        requested_at = parse_date(request.date)
    except ValueError:
        logger.warning(
            "Unparseable date on reservation %s or request %s", reservation.key, request.key
        )
        return False
    delta = timedelta(hours=window_hours)
    return reservation_at - delta < requested_at < reservation_at + delta


def matches(
    reservation: Reservation,
    request: NotificationRequest,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> bool:
    if not request.active:
        return False
    if config.exclude_self_matches and reservation.owner == request.owner:
        return False
    return (
        date_matches(reservation, request, config.flexible_window_hours)
        and _field_matches(reservation.restaurant, request.restaurant)
        and _field_matches(reservation.branch, request.branch)
    )


def build_match_payload(title: str, reservation: Reservation) -> NotificationPayload:
    restaurant = reservation.restaurant or "a restaurant"
    when = display_date(reservation.date) if reservation.date else "any time"
    return NotificationPayload(
        title=title,
        body=f"Reservation to {restaurant} on {when} matches your request",
        data={"reservationId": reservation.key},
    )


class MatchEngine:
    def __init__(self, store: Store, notifier: Notifier, config: EngineConfig = DEFAULT_ENGINE_CONFIG):
        self.store = store
        self.notifier = notifier
        self.config = config

    def on_new_reservation(self, reservation: Reservation) -> int:
        """Notify the owner of every standing request the new reservation satisfies."""
        candidates = parse_records(
            NotificationRequest,
            self.store.read_by_equality(NOTIFICATION_REQUESTS, "numOfPeople", reservation.party_size),
        )
        matched = [q for q in candidates if matches(reservation, q, self.config)]
        logger.info(
            "Reservation %s: %d candidate requests, %d matches",
            reservation.key, len(candidates), len(matched),
        )

        payload = build_match_payload(NEW_RESERVATION_TITLE, reservation)
        run_all(
            [partial(self.notifier.send, q.owner, payload) for q in matched],
            self.config.max_workers,
        )
        return len(matched)

    def on_new_request(self, request: NotificationRequest) -> int:
        """Tell the request's owner about every live reservation it already matches."""
        candidates = parse_records(
            Reservation,
            self.store.read_by_equality(RESERVATIONS, "numOfPeople", request.party_size),
        )
        matched = [r for r in candidates if matches(r, request, self.config)]
        logger.info(
            "Request %s: %d candidate reservations, %d matches",
            request.key, len(candidates), len(matched),
        )

        run_all(
            [
                partial(self.notifier.send, request.owner, build_match_payload(EXISTING_RESERVATION_TITLE, r))
                for r in matched
            ],
            self.config.max_workers,
        )
        return len(matched)
