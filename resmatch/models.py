from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .dates import day_label, parse_date, time_slot
from .store.base import check_bucket

logger = logging.getLogger(__name__)


def _blank_to_wildcard(value: Any) -> Any:
    # Stored records use "" for "any value"; None is the explicit wildcard here.
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return value


class StoredRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    key: str = ""

    @classmethod
    def from_store(cls, key: str, raw: dict[str, Any]):
        return cls.model_validate({**raw, "key": key})


class BookedSlot(StoredRecord):
    """Only the fields that place a reservation in a statistics bucket.

    Archived reservations are counted through this model so that unrelated
    fields can never drop a record from the counts.
    """

    restaurant: str | None = None
    date: str | None = None
    day: str | None = None
    time: str | None = None
    spam: bool = False

    @field_validator("restaurant", "date", "day", "time", mode="before")
    @classmethod
    def blank_to_wildcard(cls, value: Any) -> Any:
        return _blank_to_wildcard(value)

    @field_validator("spam", mode="before")
    @classmethod
    def missing_spam_flag(cls, value: Any) -> Any:
        return False if value is None else value

    def _parsed_date(self) -> datetime | None:
        if not self.date:
            return None
        try:
            return parse_date(self.date)
        except ValueError:
            return None

    @property
    def bucket_day(self) -> str | None:
        """Statistics day label, derived from the date when not stored."""
        if self.day:
            return self.day
        parsed = self._parsed_date()
        return day_label(parsed) if parsed else None

    @property
    def bucket_slot(self) -> str | None:
        if self.time:
            return self.time
        parsed = self._parsed_date()
        return time_slot(parsed) if parsed else None


class Reservation(BookedSlot):
    owner: str = Field(..., alias="uid")
    branch: str | None = None
    party_size: int = Field(default=0, alias="numOfPeople", ge=0)
    hotness: int = Field(default=0, ge=0, le=10)

    @field_validator("branch", mode="before")
    @classmethod
    def blank_branch_to_wildcard(cls, value: Any) -> Any:
        return _blank_to_wildcard(value)


class NotificationRequest(StoredRecord):
    owner: str = Field(..., alias="uid")
    restaurant: str | None = None
    branch: str | None = None
    date: str | None = None
    flexible: bool = Field(default=False, alias="isFlexible")
    party_size: int = Field(default=0, alias="numOfPeople", ge=0)
    active: bool = True

    @field_validator("restaurant", "branch", "date", mode="before")
    @classmethod
    def blank_to_wildcard(cls, value: Any) -> Any:
        return _blank_to_wildcard(value)


class User(StoredRecord):
    stars: int = Field(default=0, ge=0, le=3)
    reliability: float = Field(default=0.0, ge=0.0, le=100.0)
    star_remove_date: str | None = Field(default=None, alias="starRemoveDate")
    uploads_this_month: int = Field(default=0, alias="uploadsThisMonth", ge=0)
    instance_id: str | None = Field(default=None, alias="instanceId")
    spam_reports: int = Field(default=0, alias="spamReports", ge=0)


class Review(StoredRecord):
    author: str = Field(..., alias="uid")
    busy_rate: float = Field(..., alias="busyRate", ge=0.0, le=10.0)
    rate: float = Field(..., ge=0.0, le=10.0)


class NotificationPayload(BaseModel):
    title: str
    body: str
    data: dict[str, str] = Field(default_factory=dict)


Record = TypeVar("Record", bound=StoredRecord)


def parse_records(model: type[Record], raw_records: dict[str, Any]) -> list[Record]:
    """Parse stored mappings into *model*, skipping malformed entries."""
    records: list[Record] = []
    for key, raw in raw_records.items():
        if not isinstance(raw, dict):
            logger.warning("Skipping %s %s: not a mapping", model.__name__, key)
            continue
        try:
            records.append(model.from_store(key, raw))
        except ValidationError as exc:
            logger.warning("Skipping malformed %s %s: %s", model.__name__, key, exc)
    return records


class BucketEvent(BaseModel):
    restaurant: str = Field(..., min_length=1)
    day: str = Field(..., min_length=1)
    slot: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def usable_as_path(self):
        check_bucket(self.restaurant, self.day, self.slot)
        return self


class HotnessEvent(BucketEvent):
    hotness: float = Field(..., ge=0.0, le=10.0)
