from __future__ import annotations

from .config import DEFAULT_ENGINE_CONFIG
from .notify.base import Notifier
from .notify.log import LogNotifier
from .store.base import Store
from .store.memory import InMemoryStore

_store: Store | None = None
_notifier: Notifier | None = None


def _build_store() -> Store:
    if DEFAULT_ENGINE_CONFIG.store_backend == "firebase":
        from .store.firebase import FirebaseStore

        return FirebaseStore()
    return InMemoryStore()


def _build_notifier(store: Store) -> Notifier:
    if DEFAULT_ENGINE_CONFIG.store_backend == "firebase":
        from .notify.fcm import FcmNotifier
        from .store.firebase import get_firebase_app

        return FcmNotifier(store, get_firebase_app())
    return LogNotifier()


def get_store() -> Store:
    """Return the process-wide store, building it on first call."""
    global _store
    if _store is None:
        _store = _build_store()
    return _store


def get_notifier() -> Notifier:
    global _notifier
    if _notifier is None:
        _notifier = _build_notifier(get_store())
    return _notifier


def set_runtime(store: Store | None = None, notifier: Notifier | None = None) -> None:
    global _store, _notifier
    _store = store
    _notifier = notifier


def reset_runtime() -> None:
    set_runtime(None, None)
