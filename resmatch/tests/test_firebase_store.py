from __future__ import annotations

from unittest.mock import patch

import pytest
from firebase_admin import exceptions

from resmatch.errors import StoreError
from resmatch.store.firebase import FirebaseStore, _as_mapping

APP = object()


@pytest.fixture
def reference():
    with patch("resmatch.store.firebase.db.reference") as ref:
        yield ref


def test_as_mapping_normalises_results():
    assert _as_mapping(None) == {}
    assert _as_mapping(["a", None, "c"]) == {"0": "a", "2": "c"}
    assert _as_mapping({"k": 1}) == {"k": 1}


def test_read_uses_child_path(reference):
    reference.return_value.get.return_value = 80

    assert FirebaseStore(APP).read("users/u1", "reliability") == 80
    reference.assert_called_once_with("users/u1/reliability", app=APP)


def test_equality_query(reference):
    query = reference.return_value.order_by_child.return_value.equal_to.return_value
    query.get.return_value = {"q1": {"numOfPeople": 2}}

    hits = FirebaseStore(APP).read_by_equality("notificationRequests", "numOfPeople", 2)

    assert hits == {"q1": {"numOfPeople": 2}}
    reference.return_value.order_by_child.assert_called_once_with("numOfPeople")
    reference.return_value.order_by_child.return_value.equal_to.assert_called_once_with(2)


def test_range_query_with_open_lower_bound(reference):
    ordered = reference.return_value.order_by_child.return_value
    ordered.end_at.return_value.get.return_value = None

    assert FirebaseStore(APP).read_by_range("reservations", "date", None, "2024/01/10 22:00") == {}
    ordered.start_at.assert_not_called()
    ordered.end_at.assert_called_once_with("2024/01/10 22:00")


def test_range_query_with_both_bounds(reference):
    ordered = reference.return_value.order_by_child.return_value
    ordered.start_at.return_value.end_at.return_value.get.return_value = {"u": {"stars": 2}}

    assert FirebaseStore(APP).read_by_range("users", "stars", 1, 3) == {"u": {"stars": 2}}


def test_write_and_delete(reference):
    store = FirebaseStore(APP)

    store.write("historyReservations", "r1", {"uid": "a"})
    reference.return_value.set.assert_called_once_with({"uid": "a"})

    store.write("users/u1", "starRemoveDate", None)
    store.delete("reservations", "r1")
    assert reference.return_value.delete.call_count == 2


def test_firebase_errors_become_store_errors(reference):
    reference.return_value.get.side_effect = exceptions.UnavailableError("backend down")

    with pytest.raises(StoreError, match="read_all\\(reservations\\)"):
        FirebaseStore(APP).read_all("reservations")


def test_unrelated_errors_propagate(reference):
    reference.return_value.get.side_effect = KeyError("x")

    with pytest.raises(KeyError):
        FirebaseStore(APP).read_all("reservations")
