"""Pending-notification queue for urgent agent-raised alerts.

Urgent alerts addressed to the default human target are appended to a
JSON queue file. An external dispatcher polls the queue, delivers the
messages, and clears the entries it sent. Queue failures never block
alert creation: ``enqueue`` logs and returns False.
"""

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from fleetwatch.alerts.config import AlertStoreConfig
from fleetwatch.alerts.schemas import Alert, to_epoch_ms, utc_now
from fleetwatch.storage.documents import JsonDocument

logger = logging.getLogger(__name__)


@dataclass
class PendingNotification:
    """A queued outbound notification for one alert."""

    notification_id: str
    alert_id: str
    priority: str
    agent: str
    message: str
    queued_at: int
    channel: str
    to: str | None = None
    details: str | None = None
    task_id: str | None = None
    task_title: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = {
            "id": self.notification_id,
            "alertId": self.alert_id,
            "priority": self.priority,
            "agent": self.agent,
            "message": self.message,
            "details": self.details,
            "taskId": self.task_id,
            "taskTitle": self.task_title,
            "queuedAt": self.queued_at,
            "channel": self.channel,
            "to": self.to,
        }
        return {k: v for k, v in data.items() if v is not None}


def should_notify(alert: Alert, config: AlertStoreConfig) -> bool:
    """Only urgent alerts aimed at the default human target are queued."""
    if alert.priority != "urgent":
        return False
    return alert.target_agent in (None, config.default_target_agent)


class NotificationQueue:
    """File-backed queue read by the notification dispatcher."""

    def __init__(self, path: Path, config: AlertStoreConfig | None = None) -> None:
        self._document = JsonDocument(path)
        self._config = config or AlertStoreConfig()

    async def pending(self) -> list[dict[str, Any]]:
        """Queued notifications; a missing or corrupt queue reads as empty."""
        try:
            data = await self._document.read()
        except (OSError, ValueError) as e:
            logger.warning("Notification queue unreadable at %s: %s", self._document.path, e)
            return []
        if not isinstance(data, list):
            return []
        return [item for item in data if isinstance(item, dict)]

    async def enqueue(self, alert: Alert) -> bool:
        """Append a notification for ``alert``.

        Returns:
            True if queued, False if the queue could not be written.
        """
        notification = PendingNotification(
            notification_id=f"notif-{uuid.uuid4().hex[:8]}",
            alert_id=alert.alert_id,
            priority=alert.priority,
            agent=alert.agent.agent_id,
            message=alert.message,
            details=alert.details,
            task_id=alert.task_id,
            task_title=alert.task_title,
            queued_at=to_epoch_ms(utc_now()),
            channel=self._config.notify_channel,
            to=self._config.notify_to,
        )

        try:
            queue = await self.pending()
            queue.append(notification.to_dict())
            await self._document.write(queue)
        except OSError as e:
            logger.error("Failed to queue notification for %s: %s", alert.alert_id, e)
            return False

        logger.info("Queued %s notification for alert %s", notification.channel, alert.alert_id)
        return True

    async def clear(self, ids: list[str] | None = None) -> tuple[int, int]:
        """Drop dispatched notifications.

        Args:
            ids: Notification ids to drop; None or empty clears everything.

        Returns:
            (cleared, remaining) counts.

        Raises:
            OSError: If the queue cannot be rewritten.
        """
        queue = await self.pending()
        if not ids:
            await self._document.write([])
            return len(queue), 0

        wanted = set(ids)
        remaining = [item for item in queue if item.get("id") not in wanted]
        await self._document.write(remaining)
        return len(queue) - len(remaining), len(remaining)
