"""
Record store layer.

Responsibilities:
- Define the store operations the engine consumes (read, query, write, delete).
- Provide an in-memory tree for local runs and tests.
- Provide the Firebase Realtime Database backend for production.
"""
from .base import Store
from .memory import InMemoryStore

__all__ = ["Store", "InMemoryStore"]
