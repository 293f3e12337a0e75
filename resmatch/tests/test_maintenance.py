from __future__ import annotations

from datetime import datetime

from resmatch.config import EngineConfig
from resmatch.engine.maintenance import UserMaintenance

NOW = datetime(2024, 3, 1, 12, 0)


def test_due_user_loses_a_star_and_gets_new_date(store):
    store.write("users", "u1", {"stars": 3, "starRemoveDate": "2024/03/01 12:00"})

    assert UserMaintenance(store).decay_stars(NOW) == 1

    user = store.read("users", "u1")
    assert user["stars"] == 2
    assert user["starRemoveDate"] == "2024/03/31 12:00"


def test_last_star_clears_removal_date(store):
    store.write("users", "u1", {"stars": 1, "starRemoveDate": "2024/02/01 08:00"})

    UserMaintenance(store).decay_stars(NOW)

    assert store.read("users", "u1") == {"stars": 0}


def test_users_not_yet_due_are_untouched(store):
    store.write("users", "future", {"stars": 2, "starRemoveDate": "2024/03/01 12:01"})
    store.write("users", "starless", {"stars": 0})

    assert UserMaintenance(store).decay_stars(NOW) == 0
    assert store.read("users", "future")["stars"] == 2
    assert store.read("users", "starless") == {"stars": 0}


def test_decay_period_is_configurable(store):
    store.write("users", "u1", {"stars": 2, "starRemoveDate": "2024/02/20 00:00"})

    UserMaintenance(store, EngineConfig(star_decay_days=7)).decay_stars(NOW)

    assert store.read("users", "u1")["starRemoveDate"] == "2024/03/08 12:00"


def test_reset_upload_quotas(store):
    store.write("users", "busy", {"uploadsThisMonth": 4, "stars": 1})
    store.write("users", "idle", {"uploadsThisMonth": 0})
    store.write("users", "new", {"stars": 0})

    assert UserMaintenance(store).reset_upload_quotas() == 1
    assert store.read("users", "busy") == {"uploadsThisMonth": 0, "stars": 1}
    assert store.read("users", "new") == {"stars": 0}
