"""
Firebase Realtime Database backend.

Collections map onto database paths one to one, so the engine sees the same
tree the mobile clients write to.
"""
from __future__ import annotations

import functools
import logging
from typing import Any

import firebase_admin
from firebase_admin import credentials, db
from firebase_admin.exceptions import FirebaseError

from ..config import DEFAULT_ENGINE_CONFIG, EngineConfig
from ..errors import StoreError
from .base import Store, child

logger = logging.getLogger(__name__)


def get_firebase_app(config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> firebase_admin.App:
    """Return the default Firebase app, initialising it on first call."""
    if firebase_admin._apps:
        return firebase_admin.get_app()
    if config.firebase_credentials:
        cred = credentials.Certificate(config.firebase_credentials)
    else:
        # Uses default credentials from environment
        cred = credentials.ApplicationDefault()
    options = {"databaseURL": config.firebase_database_url} if config.firebase_database_url else None
    app = firebase_admin.initialize_app(cred, options)
    logger.info("Firebase Admin SDK initialized")
    return app


def _as_mapping(value: Any) -> dict[str, Any]:
    # The database returns a list when every child key is a small integer.
    if value is None:
        return {}
    if isinstance(value, list):
        return {str(i): v for i, v in enumerate(value) if v is not None}
    return dict(value)


def _wrap_errors(func):
    @functools.wraps(func)
    def wrapper(self, collection, *args, **kwargs):
        try:
            return func(self, collection, *args, **kwargs)
        except FirebaseError as exc:
            raise StoreError(f"{func.__name__}({collection}) failed: {exc}") from exc
    return wrapper


class FirebaseStore(Store):
    def __init__(self, app: firebase_admin.App | None = None):
        self.app = app or get_firebase_app()

    def _ref(self, path: str) -> db.Reference:
        return db.reference(path or "/", app=self.app)

    @_wrap_errors
    def read(self, collection: str, key: str) -> Any | None:
        return self._ref(child(collection, key)).get()

    @_wrap_errors
    def read_all(self, collection: str) -> dict[str, Any]:
        return _as_mapping(self._ref(collection).get())

    @_wrap_errors
    def read_by_equality(self, collection: str, field: str, value: Any) -> dict[str, Any]:
        return _as_mapping(self._ref(collection).order_by_child(field).equal_to(value).get())

    @_wrap_errors
    def read_by_range(
        self,
        collection: str,
        field: str,
        lower: Any | None = None,
        upper: Any | None = None,
    ) -> dict[str, Any]:
        query = self._ref(collection).order_by_child(field)
        if lower is not None:
            query = query.start_at(lower)
        if upper is not None:
            query = query.end_at(upper)
        return _as_mapping(query.get())

    @_wrap_errors
    def write(self, collection: str, key: str, value: Any) -> None:
        ref = self._ref(child(collection, key))
        if value is None:
            ref.delete()
        else:
            ref.set(value)

    @_wrap_errors
    def delete(self, collection: str, key: str) -> None:
        self._ref(child(collection, key)).delete()
