from __future__ import annotations

import logging
from datetime import datetime, timedelta
from functools import partial

from ..config import DEFAULT_ENGINE_CONFIG, EngineConfig
from ..dates import format_date
from ..models import User, parse_records
from ..store.base import USERS, Store, child
from .fanout import run_all

logger = logging.getLogger(__name__)


class UserMaintenance:
    """Periodic sweeps over user records: star decay and upload quota reset."""

    def __init__(self, store: Store, config: EngineConfig = DEFAULT_ENGINE_CONFIG):
        self.store = store
        self.config = config

    def _decay(self, user: User, now: datetime) -> None:
        path = child(USERS, user.key)
        stars = max(0, user.stars - 1)
        self.store.write(path, "stars", stars)
        if stars > 0:
            next_removal = now + timedelta(days=self.config.star_decay_days)
            self.store.write(path, "starRemoveDate", format_date(next_removal))
        else:
            self.store.delete(path, "starRemoveDate")

    def decay_stars(self, now: datetime) -> int:
        """Take one star from every user whose removal date has passed."""
        due = parse_records(
            User, self.store.read_by_range(USERS, "starRemoveDate", None, format_date(now))
        )
        due = [u for u in due if u.star_remove_date and u.stars > 0]

        run_all([partial(self._decay, u, now) for u in due], self.config.max_workers)
        logger.info("Star decay: %d users lost a star", len(due))
        return len(due)

    def reset_upload_quotas(self) -> int:
        users = parse_records(User, self.store.read_all(USERS))
        used = [u for u in users if u.uploads_this_month > 0]

        run_all(
            [partial(self.store.write, child(USERS, u.key), "uploadsThisMonth", 0) for u in used],
            self.config.max_workers,
        )
        logger.info("Reset upload quota for %d users", len(used))
        return len(used)
