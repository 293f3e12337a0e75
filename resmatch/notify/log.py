from __future__ import annotations

import logging
import threading
import time
from typing import Any

from ..models import NotificationPayload
from .base import Notifier

logger = logging.getLogger(__name__)


class LogNotifier(Notifier):
    """Logs and keeps every payload instead of pushing it to a device."""

    def __init__(self) -> None:
        self._sent: list[dict[str, Any]] = []
        self._lock = threading.Lock()

    def send(self, user_id: str, payload: NotificationPayload) -> bool:
        logger.info("Notify %s: %s | %s", user_id, payload.title, payload.body)
        with self._lock:
            self._sent.append({
                "user_id": user_id,
                "payload": payload,
                "timestamp": time.time(),
            })
        return True

    def get_sent(self) -> list[dict[str, Any]]:
        with self._lock:
            return list(self._sent)

    def recipients(self) -> list[str]:
        return [s["user_id"] for s in self.get_sent()]

    def clear(self) -> None:
        with self._lock:
            self._sent.clear()
