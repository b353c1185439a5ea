import logging
from typing import Any, Dict

from .events import EventBus, NotificationCreated
from .schemas import Notification
from .store import FirestoreStore

logger = logging.getLogger(__name__)


class NotificationWriter:
    """Creates notification documents and announces them on the event bus."""

    def __init__(self, store: FirestoreStore, bus: EventBus):
        self.store = store
        self.bus = bus

    async def create(self, user_id: str, title: str, body: str, data: Dict[str, Any]) -> str:
        """
        Store an unread notification and publish NotificationCreated for it.

        Args:
            user_id: The recipient's user ID
            title: Notification title
            body: Notification body
            data: Routing payload for the client

        Returns:
            The notification's document ID

        Raises:
            Exception: Whatever the record store raised; nothing is published then
        """
        notification_id = await self.store.add_notification(user_id, title, body, data)
        logger.info(f"Created notification {notification_id} for user {user_id}")

        await self.bus.publish(NotificationCreated(
            notification_id=notification_id,
            notification=Notification(userId=user_id, title=title, body=body, data=data),
        ))
        return notification_id
