import logging
from typing import Optional

from firebase_admin.exceptions import FirebaseError

from ..events import NotificationCreated
from ..push import PushClient, build_push_message
from ..store import FirestoreStore

logger = logging.getLogger(__name__)


class PushDeliveryHandler:
    """Sends a push notification for every newly created notification document."""

    def __init__(self, store: FirestoreStore, push: PushClient, channel_id: str = "sparkd_orders"):
        self.store = store
        self.push = push
        self.channel_id = channel_id

    async def handle(self, event: NotificationCreated) -> Optional[str]:
        """
        Deliver the notification to the recipient's device.

        Args:
            event: The created notification

        Returns:
            The FCM message ID, or None if nothing was sent
        """
        notification = event.notification
        user_id = notification.userId

        try:
            user = await self.store.get_user(user_id)
            fcm_token = user.fcmToken if user else None

            if not fcm_token:
                logger.info(f"No FCM token for user: {user_id}")
                return None

            message = build_push_message(
                fcm_token,
                notification.title,
                notification.body,
                notification.data or {},
                channel_id=self.channel_id,
            )
            response = await self.push.send(message)
            logger.info(f"Successfully sent notification {event.notification_id}: {response}")
            return response

        except FirebaseError as e:
            logger.error(f"Firebase messaging error for notification {event.notification_id} "
                         f"({e.code}): {str(e)}")
            return None
        except Exception as e:
            logger.error(f"Error sending notification {event.notification_id}: {str(e)}", exc_info=True)
            return None
