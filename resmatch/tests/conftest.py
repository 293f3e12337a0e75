from __future__ import annotations

import pytest

from resmatch.notify.log import LogNotifier
from resmatch.store.memory import InMemoryStore


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def notifier() -> LogNotifier:
    return LogNotifier()
