import asyncio
import logging
from typing import Any, Dict, Optional

from firebase_admin import messaging

logger = logging.getLogger(__name__)

DEFAULT_SOUND = "default"
IOS_BADGE = 1


def build_push_message(token: str,
                       title: str,
                       body: str,
                       data: Optional[Dict[str, Any]] = None,
                       channel_id: str = "sparkd_orders") -> messaging.Message:
    """
    Build a high-priority FCM message for a single device.

    Args:
        token: The recipient's FCM registration token
        title: Notification title
        body: Notification body
        data: Routing payload for the client app
        channel_id: Android notification channel

    Returns:
        The FCM message
    """
    data = data or {}
    # FCM only accepts string values in the data payload
    data = {k: str(v) if not isinstance(v, str) else v for k, v in data.items()}

    return messaging.Message(
        notification=messaging.Notification(
            title=title,
            body=body
        ),
        data=data,
        token=token,
        android=messaging.AndroidConfig(
            priority="high",
            notification=messaging.AndroidNotification(
                channel_id=channel_id,
                sound=DEFAULT_SOUND,
            ),
        ),
        apns=messaging.APNSConfig(
            payload=messaging.APNSPayload(
                aps=messaging.Aps(sound=DEFAULT_SOUND, badge=IOS_BADGE),
            ),
        ),
    )


class PushClient:
    """Push delivery through Firebase Cloud Messaging."""

    def __init__(self, app=None):
        self.app = app

    async def send(self, message: messaging.Message) -> str:
        """
        Send a message and return the FCM message ID.

        Raises:
            firebase_admin.exceptions.FirebaseError: If FCM rejects the message
        """
        return await asyncio.to_thread(messaging.send, message, app=self.app)
