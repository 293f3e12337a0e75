"""
Notification delivery.

Responsibilities:
- Define the notifier contract used by the engine.
- Push payloads to devices via Firebase Cloud Messaging.
- Log payloads locally when push delivery is not configured.
"""
from .base import Notifier
from .log import LogNotifier

__all__ = ["Notifier", "LogNotifier"]
