from __future__ import annotations

import logging
from datetime import datetime

import pytest

from resmatch import jobs, triggers


def _reservation(**overrides) -> dict:
    raw = {
        "uid": "owner",
        "restaurant": "Taizu",
        "date": "2024/01/12 20:00",
        "day": "Friday",
        "time": "20:00",
        "numOfPeople": 2,
        "hotness": 8,
    }
    raw.update(overrides)
    return raw


def test_reservation_created_runs_match_and_hot_units(store, notifier):
    store.write("notificationRequests", "q1", {"uid": "seeker", "restaurant": "Taizu", "numOfPeople": 2})
    store.write("users", "vip", {"stars": 3})

    result = triggers.on_reservation_created("r1", _reservation(), store, notifier)

    assert result == {"matched": 1, "hot_notified": 1}
    assert sorted(notifier.recipients()) == ["seeker", "vip"]


def test_failed_unit_is_logged_and_other_unit_still_runs(store, notifier, monkeypatch, caplog):
    store.write("users", "vip", {"stars": 3})

    def broken(self, reservation):
        raise RuntimeError("requests unavailable")

    monkeypatch.setattr("resmatch.engine.matching.MatchEngine.on_new_reservation", broken)

    with caplog.at_level(logging.ERROR, logger="resmatch.triggers"):
        result = triggers.on_reservation_created("r1", _reservation(), store, notifier)

    assert result == {"matched": None, "hot_notified": 1}
    assert "notifyOnMatch finished with error" in caplog.text


def test_malformed_reservation_is_dropped(store, notifier):
    result = triggers.on_reservation_created("r1", {"restaurant": "Taizu"}, store, notifier)

    assert result == {"matched": None, "hot_notified": None}
    assert notifier.get_sent() == []


def test_request_created_notifies_owner(store, notifier):
    store.write("reservations", "r1", _reservation())

    count = triggers.on_request_created(
        "q1", {"uid": "seeker", "restaurant": "Taizu", "numOfPeople": 2}, store, notifier
    )

    assert count == 1
    assert notifier.recipients() == ["seeker"]


def test_review_created_recomputes_and_restamps(store):
    store.write("users", "critic", {"reliability": 100})
    store.write("reviews/Taizu/Friday/20:00", "rv1", {"uid": "critic", "busyRate": 9, "rate": 9})
    store.write("reservations", "r1", _reservation(hotness=0))

    hotness = triggers.on_review_created("Taizu", "Friday", "20:00", store)

    assert hotness == pytest.approx(9.0)
    assert store.read("statistics/Taizu/Friday/20:00", "hotness") == pytest.approx(9.0)
    assert store.read("reservations/r1", "hotness") == 9


def test_review_without_weight_restamps_nothing(store):
    store.write("reviews/Taizu/Friday/20:00", "rv1", {"uid": "ghost", "busyRate": 9, "rate": 9})
    store.write("reservations", "r1", _reservation(hotness=3))

    assert triggers.on_review_created("Taizu", "Friday", "20:00", store) is None
    assert store.read("reservations/r1", "hotness") == 3


def test_review_with_unusable_restaurant_is_logged(store, caplog):
    with caplog.at_level(logging.ERROR, logger="resmatch.triggers"):
        assert triggers.on_review_created("Taizu/Dizengoff", "Friday", "20:00", store) is None

    assert "recalculateHotness finished with error" in caplog.text
    assert store.snapshot() == {}


def test_picked_reservation_notifies_owner(notifier):
    assert triggers.on_reservation_picked("r1", _reservation(), notifier) is True

    sent = notifier.get_sent()[0]
    assert sent["user_id"] == "owner"
    assert sent["payload"].title == triggers.PICKED_TITLE
    assert sent["payload"].data == {"reservationId": "r1"}


def test_picked_reservation_without_owner(notifier):
    assert triggers.on_reservation_picked("r1", {"restaurant": "Taizu"}, notifier) is None
    assert notifier.get_sent() == []


# ── Scheduled jobs ───────────────────────────────────────────────────────


def test_daily_statistics_archives_then_aggregates(store, notifier):
    now = datetime(2024, 1, 13, 1, 0)
    store.write("historyReservations", "yesterday", _reservation(date="2024/01/12 20:30", time=None, day=None))
    store.write("reservations", "due", _reservation(date="2024/01/13 03:00"))
    store.write("reservations", "future", _reservation(date="2024/01/14 20:00"))

    summary = jobs.run_daily_statistics(now, store, notifier)

    assert summary == {"archived": 1, "day": "Friday", "reservations": 1, "buckets": 1}
    assert set(store.read_all("reservations")) == {"future"}
    assert store.read("statistics/Taizu/Friday/20:00", "count") == 1
    assert store.read("statistics/totalNumOfDays", "Friday") == 1
