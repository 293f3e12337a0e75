"""
Event-triggered units of work.

Each handler runs one unit for a single database event. There is no caller
to report to, so a failure is logged and swallowed; nothing is retried.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

from .config import DEFAULT_ENGINE_CONFIG, EngineConfig
from .engine.hotness import HotnessCalculator
from .engine.matching import MatchEngine
from .engine.tiers import TieredNotifier
from .models import NotificationPayload, NotificationRequest, Reservation
from .notify.base import Notifier
from .store.base import Store

logger = logging.getLogger(__name__)

T = TypeVar("T")

PICKED_TITLE = "Reservation has been picked up!"


def _run_unit(name: str, func: Callable[[], T]) -> T | None:
    try:
        result = func()
    except Exception:
        logger.error("%s finished with error", name, exc_info=True)
        return None
    logger.info("%s successfully finished", name)
    return result


def on_reservation_created(
    key: str,
    raw: dict[str, Any],
    store: Store,
    notifier: Notifier,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> dict[str, int | None]:
    """Match the new reservation against requests, then fan out hot alerts."""
    reservation = _run_unit("parse reservation", lambda: Reservation.from_store(key, raw))
    if reservation is None:
        return {"matched": None, "hot_notified": None}

    matched = _run_unit(
        "notifyOnMatch", lambda: MatchEngine(store, notifier, config).on_new_reservation(reservation)
    )
    hot = _run_unit(
        "notifyHotReservation",
        lambda: TieredNotifier(store, notifier, config).dispatch_hot_notifications(reservation),
    )
    return {"matched": matched, "hot_notified": hot}


def on_request_created(
    key: str,
    raw: dict[str, Any],
    store: Store,
    notifier: Notifier,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> int | None:
    request = _run_unit("parse notification request", lambda: NotificationRequest.from_store(key, raw))
    if request is None:
        return None
    return _run_unit(
        "notifyOnRequestMatch", lambda: MatchEngine(store, notifier, config).on_new_request(request)
    )


def on_bucket_hotness_written(
    restaurant: str,
    day: str,
    slot: str,
    hotness: float,
    store: Store,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> int | None:
    return _run_unit(
        "restampReservationHotness",
        lambda: HotnessCalculator(store, config).restamp_reservations(restaurant, day, slot, hotness),
    )


def on_review_created(
    restaurant: str,
    day: str,
    slot: str,
    store: Store,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> float | None:
    """Recompute the bucket's hotness; the resulting write restamps reservations."""
    hotness = _run_unit(
        "recalculateHotness",
        lambda: HotnessCalculator(store, config).recompute(restaurant, day, slot),
    )
    if hotness is not None:
        on_bucket_hotness_written(restaurant, day, slot, hotness, store, config)
    return hotness


def on_reservation_picked(key: str, raw: dict[str, Any], notifier: Notifier) -> bool | None:
    """Tell the reservation's owner somebody picked it up."""
    owner = raw.get("uid")
    if not owner:
        logger.warning("Picked reservation without owner, nobody to notify")
        return None
    payload = NotificationPayload(
        title=PICKED_TITLE,
        body=f"Your reservation to {raw.get('restaurant') or 'a restaurant'} has been picked up!",
        data={"reservationId": key},
    )
    return _run_unit("notifyOnPickedReservation", lambda: notifier.send(owner, payload))
