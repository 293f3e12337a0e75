from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from ..errors import InvalidKeyError

RESERVATIONS = "reservations"
NOTIFICATION_REQUESTS = "notificationRequests"
HISTORY_RESERVATIONS = "historyReservations"
HISTORY_NOTIFICATION_REQUESTS = "historyNotificationRequests"
USERS = "users"
REVIEWS = "reviews"
STATISTICS = "statistics"
TOTAL_NUM_OF_DAYS_KEY = "totalNumOfDays"
TOTAL_NUM_OF_DAYS = f"{STATISTICS}/{TOTAL_NUM_OF_DAYS_KEY}"

# Characters the realtime database refuses in a key.
FORBIDDEN_KEY_CHARS = frozenset("/.$#[]")
RESERVED_RESTAURANT_NAMES = frozenset({TOTAL_NUM_OF_DAYS_KEY})


def child(*parts: str) -> str:
    """Join path segments into a collection path."""
    return "/".join(p.strip("/") for p in parts if p)


def check_key(value: str) -> str:
    """Return *value* if it can be used as one path segment, else raise."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidKeyError(f"empty path segment: {value!r}")
    bad = FORBIDDEN_KEY_CHARS.intersection(value)
    if bad:
        raise InvalidKeyError(f"{value!r} contains {''.join(sorted(bad))!r}")
    return value


def check_bucket(restaurant: str, day: str, slot: str) -> tuple[str, str, str]:
    """Validate a restaurant/day/slot triple before it becomes a path."""
    if restaurant in RESERVED_RESTAURANT_NAMES:
        raise InvalidKeyError(f"{restaurant!r} is a reserved name")
    return check_key(restaurant), check_key(day), check_key(slot)


def review_bucket(restaurant: str, day: str, slot: str) -> str:
    return child(REVIEWS, *check_bucket(restaurant, day, slot))


def statistics_bucket(restaurant: str, day: str, slot: str) -> str:
    return child(STATISTICS, *check_bucket(restaurant, day, slot))


class Store(ABC):
    """Keyed, range-queryable record store.

    A *collection* is a slash-separated path; its children are addressed by
    *key*. Every call is a single request/response, with no multi-key
    transactions. Query results map child key to stored value.
    """

    @abstractmethod
    def read(self, collection: str, key: str) -> Any | None: ...

    @abstractmethod
    def read_all(self, collection: str) -> dict[str, Any]: ...

    @abstractmethod
    def read_by_equality(self, collection: str, field: str, value: Any) -> dict[str, Any]: ...

    @abstractmethod
    def read_by_range(
        self,
        collection: str,
        field: str,
        lower: Any | None = None,
        upper: Any | None = None,
    ) -> dict[str, Any]:
        """Children whose *field* lies in ``[lower, upper]``; a ``None`` bound is open."""

    @abstractmethod
    def write(self, collection: str, key: str, value: Any) -> None: ...

    @abstractmethod
    def delete(self, collection: str, key: str) -> None: ...
