from __future__ import annotations

import copy
import threading
from typing import Any

from .base import Store


def _order_key(value: Any) -> tuple:
    # Realtime Database child ordering: null < booleans < numbers < strings < objects.
    if value is None:
        return (0,)
    if isinstance(value, bool):
        return (1, value)
    if isinstance(value, (int, float)):
        return (2, value)
    if isinstance(value, str):
        return (3, value)
    return (4,)


class InMemoryStore(Store):
    """Thread-safe nested-dict tree with the same query semantics as the
    realtime database backend. Used for local runs and as the test fake."""

    def __init__(self, data: dict[str, Any] | None = None):
        self._root: dict[str, Any] = copy.deepcopy(data) if data else {}
        self._lock = threading.RLock()

    def _node(self, collection: str, create: bool = False) -> dict[str, Any] | None:
        node = self._root
        for part in (p for p in collection.split("/") if p):
            nxt = node.get(part)
            if not isinstance(nxt, dict):
                if not create:
                    return None
                nxt = {}
                node[part] = nxt
            node = nxt
        return node

    def _children(self, collection: str) -> dict[str, Any]:
        node = self._node(collection)
        if not node:
            return {}
        return {k: node[k] for k in sorted(node)}

    def _query(self, collection: str, field: str, predicate) -> dict[str, Any]:
        with self._lock:
            children = self._children(collection)
            hits = [
                (k, v)
                for k, v in children.items()
                if predicate(_order_key(v.get(field) if isinstance(v, dict) else None))
            ]
            hits.sort(
                key=lambda kv: (
                    _order_key(kv[1].get(field) if isinstance(kv[1], dict) else None),
                    kv[0],
                )
            )
            return {k: copy.deepcopy(v) for k, v in hits}

    def read(self, collection: str, key: str) -> Any | None:
        with self._lock:
            node = self._node(collection)
            if node is None:
                return None
            return copy.deepcopy(node.get(key))

    def read_all(self, collection: str) -> dict[str, Any]:
        with self._lock:
            return copy.deepcopy(self._children(collection))

    def read_by_equality(self, collection: str, field: str, value: Any) -> dict[str, Any]:
        target = _order_key(value)
        return self._query(collection, field, lambda k: k == target)

    def read_by_range(
        self,
        collection: str,
        field: str,
        lower: Any | None = None,
        upper: Any | None = None,
    ) -> dict[str, Any]:
        lo = _order_key(lower) if lower is not None else None
        hi = _order_key(upper) if upper is not None else None
        return self._query(
            collection,
            field,
            lambda k: (lo is None or k >= lo) and (hi is None or k <= hi),
        )

    def write(self, collection: str, key: str, value: Any) -> None:
        if value is None:
            self.delete(collection, key)
            return
        with self._lock:
            node = self._node(collection, create=True)
            node[key] = copy.deepcopy(value)

    def delete(self, collection: str, key: str) -> None:
        with self._lock:
            node = self._node(collection)
            if node is not None:
                node.pop(key, None)

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return copy.deepcopy(self._root)
