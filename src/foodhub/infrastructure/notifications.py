"""Notification adapter.

Delivery (in-app, e-mail) belongs to another service; this adapter only
records the request in the log so it can be shipped from there.
"""

from __future__ import annotations

import logging

from foodhub.application.ports import Notification, Notifier

logger = logging.getLogger(__name__)


class LoggingNotifier(Notifier):

    def notify(self, notification: Notification) -> None:
        logger.info(
            "notify %s [%s] %s: %s (order %s)",
            notification.recipient_id,
            notification.category,
            notification.title,
            notification.message,
            notification.related_order_id,
        )
