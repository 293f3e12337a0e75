"""
Crowd-sourced hotness per restaurant/day/time-slot bucket.

Every review contributes ``0.6 * busyRate + 0.4 * rate``, weighted by its
author's reliability mapped from 0-100 onto 0-5. The bucket's hotness is the
weighted mean over all of its reviews.

``hotness_mode="incremental"`` reproduces the legacy behaviour instead: the
running sum is divided by the running weight after every review and the
intermediate value is written back each time. Because the running value is
itself replaced by the quotient, earlier reviews are divided down repeatedly
and the result differs from the weighted mean.
"""
from __future__ import annotations

import logging
from functools import partial

import numpy as np

from ..config import DEFAULT_ENGINE_CONFIG, EngineConfig
from ..models import Reservation, Review, parse_records
from ..store.base import RESERVATIONS, USERS, Store, child, review_bucket, statistics_bucket
from .fanout import run_all

logger = logging.getLogger(__name__)

BUSY_RATE_WEIGHT = 0.6
RATE_WEIGHT = 0.4
RELIABILITY_SCALE = 20.0  # 0-100 -> 0-5


def review_score(review: Review) -> float:
    return BUSY_RATE_WEIGHT * review.busy_rate + RATE_WEIGHT * review.rate


def reliability_weight(reliability: float) -> float:
    return max(0.0, min(100.0, reliability)) / RELIABILITY_SCALE


def to_reservation_hotness(hotness: float) -> int:
    # Halves round up (6.5 -> 7).
    return int(max(0, min(10, np.floor(hotness + 0.5))))


class HotnessCalculator:
    def __init__(self, store: Store, config: EngineConfig = DEFAULT_ENGINE_CONFIG):
        self.store = store
        self.config = config

    def _reliability(self, user_id: str) -> float:
        raw = self.store.read(child(USERS, user_id), "reliability")
        try:
            return float(raw) if raw is not None else 0.0
        except (TypeError, ValueError):
            logger.warning("User %s has non-numeric reliability %r", user_id, raw)
            return 0.0

    def recompute(self, restaurant: str, day: str, slot: str) -> float | None:
        """Recompute and store the bucket's hotness.

        Returns the stored value, or ``None`` when the bucket has no review
        with a positive weight (the stored value is then left untouched).
        """
        reviews = parse_records(Review, self.store.read_all(review_bucket(restaurant, day, slot)))
        if not reviews:
            return None

        reliabilities = run_all(
            [partial(self._reliability, r.author) for r in reviews],
            self.config.max_workers,
        )
        weights = np.array([reliability_weight(r) for r in reliabilities], dtype=float)
        scores = np.array([review_score(r) for r in reviews], dtype=float)

        bucket = statistics_bucket(restaurant, day, slot)
        if self.config.hotness_mode == "incremental":
            return self._recompute_incremental(bucket, weights, scores)

        if weights.sum() <= 0:
            logger.info("%s: no weighted reviews, hotness unchanged", bucket)
            return None

        hotness = float(np.average(scores, weights=weights))
        self.store.write(bucket, "hotness", hotness)
        logger.info("%s: hotness %.3f from %d reviews", bucket, hotness, len(reviews))
        return hotness

    def _recompute_incremental(self, bucket: str, weights: np.ndarray, scores: np.ndarray) -> float | None:
        hotness = 0.0
        sum_of_weights = 0.0
        written = None
        for weight, score in zip(weights, scores):
            hotness += weight * score
            sum_of_weights += weight
            if sum_of_weights <= 0:
                continue
            hotness = hotness / sum_of_weights
            self.store.write(bucket, "hotness", float(hotness))
            written = float(hotness)
        return written

    def restamp_reservations(self, restaurant: str, day: str, slot: str, hotness: float) -> int:
        """Copy the bucket's hotness onto every live reservation in that bucket."""
        value = to_reservation_hotness(hotness)
        reservations = parse_records(
            Reservation, self.store.read_by_equality(RESERVATIONS, "restaurant", restaurant)
        )
        targets = [r for r in reservations if r.bucket_day == day and r.bucket_slot == slot]

        run_all(
            [partial(self.store.write, child(RESERVATIONS, r.key), "hotness", value) for r in targets],
            self.config.max_workers,
        )
        logger.info("Restamped %d reservations at %s %s %s with hotness %d", len(targets), restaurant, day, slot, value)
        return len(targets)
