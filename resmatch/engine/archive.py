"""
Moves expired records from a live collection into its history collection.

Each record is copied verbatim under the same key and then removed from the
live collection. Moves run concurrently and there are no cross-record
transactions: a failed move leaves the record in both collections and the
next sweep finishes it.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from functools import partial
from typing import Any, Callable

from ..config import DEFAULT_ENGINE_CONFIG, EngineConfig
from ..dates import display_date, format_date
from ..models import NotificationPayload
from ..notify.base import Notifier
from ..store.base import (
    HISTORY_NOTIFICATION_REQUESTS,
    HISTORY_RESERVATIONS,
    NOTIFICATION_REQUESTS,
    RESERVATIONS,
    Store,
)
from .fanout import run_all

logger = logging.getLogger(__name__)

NOT_PICKED_TITLE = "Your reservation wasn't picked"

BeforeMove = Callable[[str, dict[str, Any]], None]


def _has_date(record: Any) -> bool:
    return isinstance(record, dict) and isinstance(record.get("date"), str) and bool(record["date"].strip())


class Archiver:
    def __init__(self, store: Store, notifier: Notifier, config: EngineConfig = DEFAULT_ENGINE_CONFIG):
        self.store = store
        self.notifier = notifier
        self.config = config

    def _move(
        self,
        live: str,
        history: str,
        key: str,
        record: dict[str, Any],
        before_move: BeforeMove | None = None,
    ) -> None:
        if before_move:
            before_move(key, record)
        self.store.write(history, key, record)
        self.store.delete(live, key)

    def archive_expired(
        self,
        live: str,
        history: str,
        cutoff: str,
        before_move: BeforeMove | None = None,
    ) -> int:
        """Move every record of *live* dated at or before *cutoff* into *history*.

        Records without a date are placeholders and stay where they are.
        Returns the number of records moved.
        """
        expired = self.store.read_by_range(live, "date", None, cutoff)
        movable = {k: v for k, v in expired.items() if _has_date(v)}
        skipped = len(expired) - len(movable)
        if skipped:
            logger.debug("%s: leaving %d undated records in place", live, skipped)

        logger.info("Moving %d items from %s to %s (cutoff %s)", len(movable), live, history, cutoff)
        run_all(
            [partial(self._move, live, history, k, v, before_move) for k, v in movable.items()],
            self.config.max_workers,
        )
        return len(movable)

    def _notify_not_picked(self, key: str, record: dict[str, Any]) -> None:
        owner = record.get("uid")
        if not owner:
            return
        restaurant = record.get("restaurant") or "a restaurant"
        payload = NotificationPayload(
            title=NOT_PICKED_TITLE,
            body=f"Nobody picked your reservation to {restaurant} on {display_date(record['date'])}",
            data={"reservationId": key},
        )
        self.notifier.send(owner, payload)

    def archive_reservations(self, now: datetime) -> int:
        """Reservations starting within the lookahead are stale; their owners are told."""
        cutoff = format_date(now + timedelta(hours=self.config.reservation_lookahead_hours))
        return self.archive_expired(
            RESERVATIONS, HISTORY_RESERVATIONS, cutoff, before_move=self._notify_not_picked
        )

    def archive_notification_requests(self, now: datetime) -> int:
        cutoff = format_date(now + timedelta(hours=self.config.request_archive_offset_hours))
        return self.archive_expired(NOTIFICATION_REQUESTS, HISTORY_NOTIFICATION_REQUESTS, cutoff)
