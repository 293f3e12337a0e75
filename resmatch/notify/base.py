from __future__ import annotations

from abc import ABC, abstractmethod

from ..models import NotificationPayload


class Notifier(ABC):
    @abstractmethod
    def send(self, user_id: str, payload: NotificationPayload) -> bool:
        """Deliver *payload* to *user_id*.

        Returns ``False`` when the user has no delivery address or delivery
        failed. Delivery problems never raise.
        """
