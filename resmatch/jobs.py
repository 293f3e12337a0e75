"""
Scheduled units of work.

The scheduler calls these through the ``/cron`` endpoints. Unlike event
triggers they raise on failure so the endpoint can echo the error back.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any

from .config import DEFAULT_ENGINE_CONFIG, EngineConfig
from .dates import previous_day
from .engine.archive import Archiver
from .engine.maintenance import UserMaintenance
from .engine.stats import StatsAggregator
from .notify.base import Notifier
from .store.base import HISTORY_RESERVATIONS, Store


def archive_reservations(
    now: datetime, store: Store, notifier: Notifier, config: EngineConfig = DEFAULT_ENGINE_CONFIG
) -> int:
    return Archiver(store, notifier, config).archive_reservations(now)


def archive_notification_requests(
    now: datetime, store: Store, notifier: Notifier, config: EngineConfig = DEFAULT_ENGINE_CONFIG
) -> int:
    return Archiver(store, notifier, config).archive_notification_requests(now)


def run_daily_statistics(
    now: datetime, store: Store, notifier: Notifier, config: EngineConfig = DEFAULT_ENGINE_CONFIG
) -> dict[str, Any]:
    """Archive what is due, then aggregate yesterday's archived reservations."""
    archived = archive_reservations(now, store, notifier, config)
    day_start, day_end, day_label = previous_day(now)
    summary = StatsAggregator(store, config).aggregate_day(
        HISTORY_RESERVATIONS, day_start, day_end, day_label
    )
    return {"archived": archived, **summary}


def decay_stars(now: datetime, store: Store, config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> int:
    return UserMaintenance(store, config).decay_stars(now)


def reset_upload_quotas(store: Store, config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> int:
    return UserMaintenance(store, config).reset_upload_quotas()
