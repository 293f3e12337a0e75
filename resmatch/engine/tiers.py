"""
Stars-tiered fan-out for hot reservations.

Hotness values are grouped into nested tiers and each star level listens to
exactly one tier:

    1 star  -> warm         {7}
    2 stars -> hot          {7, 8}
    3 stars -> boiling hot  {7, 8, 9, 10}

So a 7 reaches every starred user, an 8 reaches 2 and 3 stars, and 9-10 reach
3-star users only. Users without stars never get hot notifications.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial

from ..config import DEFAULT_ENGINE_CONFIG, EngineConfig
from ..dates import display_date
from ..models import NotificationPayload, Reservation, User, parse_records
from ..notify.base import Notifier
from ..store.base import USERS, Store
from .fanout import run_all

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tier:
    name: str
    title: str
    hotness_values: frozenset[int]


WARM = Tier("warm", "A warm reservation is available", frozenset({7}))
HOT = Tier("hot", "A hot reservation is available!", frozenset({7, 8}))
BOILING_HOT = Tier("boiling_hot", "A boiling hot reservation is available!!", frozenset({7, 8, 9, 10}))

TIER_BY_STARS: dict[int, Tier] = {1: WARM, 2: HOT, 3: BOILING_HOT}


def tier_for(stars: int, hotness: int) -> Tier | None:
    """Tier whose payload a user with *stars* receives for *hotness*, if any."""
    tier = TIER_BY_STARS.get(stars)
    if tier and hotness in tier.hotness_values:
        return tier
    return None


def build_tier_payload(tier: Tier, reservation: Reservation) -> NotificationPayload:
    restaurant = reservation.restaurant or "a restaurant"
    when = display_date(reservation.date) if reservation.date else ""
    return NotificationPayload(
        title=tier.title,
        body=f"{restaurant} {when}".strip() + " was just published",
        data={
            "reservationId": reservation.key,
            "hotness": str(reservation.hotness),
            "tier": tier.name,
        },
    )


class TieredNotifier:
    def __init__(self, store: Store, notifier: Notifier, config: EngineConfig = DEFAULT_ENGINE_CONFIG):
        self.store = store
        self.notifier = notifier
        self.config = config

    def dispatch_hot_notifications(self, reservation: Reservation) -> int:
        if reservation.hotness < self.config.hot_threshold:
            return 0

        users = parse_records(User, self.store.read_by_range(USERS, "stars", 1, 3))

        payloads: dict[str, NotificationPayload] = {}
        sends = []
        for user in users:
            if self.config.exclude_owner_from_hot and user.key == reservation.owner:
                continue
            tier = tier_for(user.stars, reservation.hotness)
            if tier is None:
                continue
            if tier.name not in payloads:
                payloads[tier.name] = build_tier_payload(tier, reservation)
            sends.append(partial(self.notifier.send, user.key, payloads[tier.name]))

        logger.info(
            "Reservation %s (hotness %d): notifying %d of %d starred users",
            reservation.key, reservation.hotness, len(sends), len(users),
        )
        run_all(sends, self.config.max_workers)
        return len(sends)
