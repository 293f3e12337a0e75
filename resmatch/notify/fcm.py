"""
Push delivery through Firebase Cloud Messaging (FCM).

The user's current device token lives at ``users/<uid>/instanceId``; it is
resolved on every send so refreshed tokens are picked up immediately.
"""
from __future__ import annotations

import logging

import firebase_admin
from firebase_admin import messaging
from firebase_admin.exceptions import FirebaseError

from ..errors import StoreError
from ..models import NotificationPayload
from ..store.base import USERS, Store, child
from .base import Notifier

logger = logging.getLogger(__name__)


class FcmNotifier(Notifier):
    def __init__(self, store: Store, app: firebase_admin.App | None = None):
        self.store = store
        self.app = app

    def resolve_token(self, user_id: str) -> str | None:
        try:
            token = self.store.read(child(USERS, user_id), "instanceId")
        except StoreError:
            logger.warning("Could not resolve device token for user %s", user_id, exc_info=True)
            return None
        return token or None

    def send(self, user_id: str, payload: NotificationPayload) -> bool:
        token = self.resolve_token(user_id)
        if not token:
            logger.warning("No device token for user %s, skipping notification", user_id)
            return False

        message = messaging.Message(
            notification=messaging.Notification(title=payload.title, body=payload.body),
            data=payload.data,
            token=token,
        )
        try:
            message_id = messaging.send(message, app=self.app)
        except FirebaseError as exc:
            logger.error("FCM delivery to user %s failed: %s", user_id, exc)
            return False

        logger.info("Sent '%s' to user %s (message %s)", payload.title, user_id, message_id)
        return True
