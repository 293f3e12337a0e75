from __future__ import annotations

import logging
from functools import partial
from typing import Any

import pandas as pd

from ..config import DEFAULT_ENGINE_CONFIG, EngineConfig
from ..errors import InvalidKeyError
from ..models import BookedSlot, parse_records
from ..store.base import STATISTICS, TOTAL_NUM_OF_DAYS, TOTAL_NUM_OF_DAYS_KEY, Store, check_bucket, statistics_bucket
from .fanout import run_all

logger = logging.getLogger(__name__)

BUCKET_COLUMNS = ["restaurant", "day", "slot"]


def _as_int(value: Any) -> int:
    try:
        return int(value) if value is not None else 0
    except (TypeError, ValueError):
        return 0


class StatsAggregator:
    def __init__(self, store: Store, config: EngineConfig = DEFAULT_ENGINE_CONFIG):
        self.store = store
        self.config = config

    def _increment(self, collection: str, key: str, by: int = 1) -> int:
        current = _as_int(self.store.read(collection, key))
        self.store.write(collection, key, current + by)
        return current + by

    def aggregate_day(self, history: str, day_start: str, day_end: str, day_label: str) -> dict[str, Any]:
        """Fold one day of archived reservations into the bucket counters.

        Each bucket touched gets a single read+write adding its number of
        reservations; the day-of-week total grows by one per run.
        """
        reservations = parse_records(
            BookedSlot, self.store.read_by_range(history, "date", day_start, day_end)
        )
        if self.config.exclude_spam:
            reservations = [r for r in reservations if not r.spam]

        rows = []
        for r in reservations:
            if not (r.restaurant and r.bucket_day and r.bucket_slot):
                logger.warning("Archived reservation %s has no bucket, not counted", r.key)
                continue
            try:
                check_bucket(r.restaurant, r.bucket_day, r.bucket_slot)
            except InvalidKeyError as exc:
                logger.warning("Archived reservation %s not counted: %s", r.key, exc)
                continue
            rows.append({"restaurant": r.restaurant, "day": r.bucket_day, "slot": r.bucket_slot})
        if rows:
            counts = pd.DataFrame(rows, columns=BUCKET_COLUMNS).groupby(BUCKET_COLUMNS).size()
        else:
            counts = pd.Series(dtype=int)

        run_all(
            [
                partial(self._increment, statistics_bucket(restaurant, day, slot), "count", int(n))
                for (restaurant, day, slot), n in counts.items()
            ],
            self.config.max_workers,
        )
        self._increment(TOTAL_NUM_OF_DAYS, day_label)

        logger.info(
            "Aggregated %d reservations into %d buckets for %s (%s - %s)",
            len(rows), len(counts), day_label, day_start, day_end,
        )
        return {"day": day_label, "reservations": len(rows), "buckets": len(counts)}


def popularity_report(store: Store, limit: int = 10) -> dict[str, Any]:
    """Busiest buckets by average reservations per occurrence of their weekday."""
    tree = store.read_all(STATISTICS)
    totals = tree.pop(TOTAL_NUM_OF_DAYS_KEY, None)
    day_totals = {day: _as_int(n) for day, n in totals.items()} if isinstance(totals, dict) else {}

    rows: list[dict[str, Any]] = []
    for restaurant, days in tree.items():
        if not isinstance(days, dict):
            continue
        for day, slots in days.items():
            if not isinstance(slots, dict):
                continue
            for slot, bucket in slots.items():
                if not isinstance(bucket, dict):
                    continue
                rows.append({
                    "restaurant": restaurant,
                    "day": day,
                    "slot": slot,
                    "reservations": _as_int(bucket.get("count")),
                    "hotness": bucket.get("hotness"),
                })

    if not rows:
        return {"total_days": day_totals, "top_buckets": []}

    df = pd.DataFrame(rows)
    df["days_observed"] = df["day"].map(day_totals).fillna(0).astype(int)
    df["avg_per_day"] = (df["reservations"] / df["days_observed"].where(df["days_observed"] > 0)).fillna(0.0).round(2)
    top = df.sort_values(["avg_per_day", "reservations"], ascending=False).head(limit)

    return {
        "total_days": day_totals,
        "top_buckets": [
            {
                "restaurant": row.restaurant,
                "day": row.day,
                "slot": row.slot,
                "reservations": int(row.reservations),
                "avg_per_day": float(row.avg_per_day),
                "hotness": None if pd.isna(row.hotness) else float(row.hotness),
            }
            for row in top.itertuples(index=False)
        ],
    }
