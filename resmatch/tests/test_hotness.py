from __future__ import annotations

from unittest.mock import patch

import pytest

from resmatch.config import EngineConfig
from resmatch.engine.hotness import HotnessCalculator, reliability_weight, to_reservation_hotness

BUCKET = "statistics/Taizu/Friday/20:00"
REVIEWS = "reviews/Taizu/Friday/20:00"


def _seed_two_reviews(store):
    store.write("users", "trusted", {"stars": 1, "reliability": 100})
    store.write("users", "casual", {"stars": 1, "reliability": 40})
    store.write(REVIEWS, "rA", {"uid": "trusted", "busyRate": 1.0, "rate": 1.0})
    store.write(REVIEWS, "rB", {"uid": "casual", "busyRate": 0.0, "rate": 0.0})


def test_reliability_maps_onto_zero_to_five():
    assert reliability_weight(100) == 5.0
    assert reliability_weight(40) == 2.0
    assert reliability_weight(0) == 0.0


def test_single_pass_weighted_mean(store):
    _seed_two_reviews(store)

    hotness = HotnessCalculator(store).recompute("Taizu", "Friday", "20:00")

    assert hotness == pytest.approx(5 / 7, rel=1e-6)
    assert store.read(BUCKET, "hotness") == pytest.approx(0.714, abs=1e-3)


def test_incremental_mode_renormalises_after_every_review(store):
    _seed_two_reviews(store)
    config = EngineConfig(hotness_mode="incremental")
    calculator = HotnessCalculator(store, config)

    with patch.object(store, "write", wraps=store.write) as spy:
        hotness = calculator.recompute("Taizu", "Friday", "20:00")

    written = [c.args[2] for c in spy.call_args_list if c.args[:2] == (BUCKET, "hotness")]
    assert written == [pytest.approx(1.0), pytest.approx(1 / 7)]
    assert hotness == pytest.approx(1 / 7)


def test_score_blends_busy_rate_and_rate(store):
    store.write("users", "u", {"reliability": 60})
    store.write(REVIEWS, "r", {"uid": "u", "busyRate": 10, "rate": 5})

    hotness = HotnessCalculator(store).recompute("Taizu", "Friday", "20:00")

    assert hotness == pytest.approx(0.6 * 10 + 0.4 * 5)


def test_unknown_author_has_no_weight(store):
    store.write("users", "known", {"reliability": 100})
    store.write(REVIEWS, "r1", {"uid": "known", "busyRate": 8, "rate": 8})
    store.write(REVIEWS, "r2", {"uid": "ghost", "busyRate": 0, "rate": 0})

    hotness = HotnessCalculator(store).recompute("Taizu", "Friday", "20:00")

    assert hotness == pytest.approx(8.0)


def test_bucket_without_weight_is_left_alone(store):
    store.write(BUCKET, "hotness", 4.2)
    store.write(REVIEWS, "r1", {"uid": "ghost", "busyRate": 9, "rate": 9})

    assert HotnessCalculator(store).recompute("Taizu", "Friday", "20:00") is None
    assert store.read(BUCKET, "hotness") == 4.2


def test_empty_bucket(store):
    assert HotnessCalculator(store).recompute("Taizu", "Friday", "20:00") is None


def test_malformed_review_is_skipped(store):
    store.write("users", "u", {"reliability": 100})
    store.write(REVIEWS, "good", {"uid": "u", "busyRate": 5, "rate": 5})
    store.write(REVIEWS, "bad", {"uid": "u", "busyRate": "very"})

    assert HotnessCalculator(store).recompute("Taizu", "Friday", "20:00") == pytest.approx(5.0)


def test_restamp_updates_reservations_in_bucket(store):
    store.write("reservations", "same", {
        "uid": "a", "restaurant": "Taizu", "date": "2024/01/12 20:00",
        "day": "Friday", "time": "20:00", "hotness": 2, "numOfPeople": 2,
    })
    store.write("reservations", "derived", {
        "uid": "b", "restaurant": "Taizu", "date": "2024/01/12 20:15", "hotness": 2, "numOfPeople": 2,
    })
    store.write("reservations", "other_day", {
        "uid": "c", "restaurant": "Taizu", "date": "2024/01/13 20:00",
        "day": "Saturday", "time": "20:00", "hotness": 2, "numOfPeople": 2,
    })
    store.write("reservations", "other_place", {
        "uid": "d", "restaurant": "Ouzeria", "date": "2024/01/12 20:00",
        "day": "Friday", "time": "20:00", "hotness": 2, "numOfPeople": 2,
    })

    count = HotnessCalculator(store).restamp_reservations("Taizu", "Friday", "20:00", 7.6)

    assert count == 2
    assert store.read("reservations/same", "hotness") == 8
    assert store.read("reservations/derived", "hotness") == 8
    assert store.read("reservations/other_day", "hotness") == 2
    assert store.read("reservations/other_place", "hotness") == 2


def test_half_point_hotness_reaches_the_hot_tier(store):
    store.write("reservations", "r", {
        "uid": "a", "restaurant": "Taizu", "date": "2024/01/12 20:00", "numOfPeople": 2,
    })

    HotnessCalculator(store).restamp_reservations("Taizu", "Friday", "20:00", 6.5)

    assert store.read("reservations/r", "hotness") == 7


@pytest.mark.parametrize(
    "raw, expected",
    [(0.714, 1), (6.5, 7), (7.5, 8), (8.5, 9), (6.49, 6), (12.0, 10), (-1.0, 0)],
)
def test_reservation_hotness_is_clamped_integer(raw, expected):
    assert to_reservation_hotness(raw) == expected
