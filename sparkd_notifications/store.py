import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from .config import Settings
from .schemas import User

logger = logging.getLogger(__name__)

# Firestore rejects write batches larger than this
MAX_BATCH_WRITES = 500


class FirestoreStore:
    """Record store for users and notifications, backed by Firestore."""

    def __init__(self, firestore_db, settings: Settings):
        self.firestore_db = firestore_db
        self.users = firestore_db.collection(settings.users_collection)
        self.notifications = firestore_db.collection(settings.notifications_collection)

    async def get_user(self, user_id: str) -> Optional[User]:
        """
        Look up a user document.

        Args:
            user_id: The user's ID

        Returns:
            The user, or None if no document exists
        """
        user_ref = self.users.document(user_id)
        user = await asyncio.to_thread(user_ref.get)

        if not user.exists:
            return None
        return User.model_validate(user.to_dict() or {})

    async def add_notification(self,
                               user_id: str,
                               title: str,
                               body: str,
                               data: Dict[str, Any]) -> str:
        """
        Create an unread notification document with a server-assigned timestamp.

        Args:
            user_id: The recipient's user ID
            title: Notification title
            body: Notification body
            data: Routing payload for the client

        Returns:
            The new notification's document ID
        """
        notification_data = {
            'userId': user_id,
            'title': title,
            'body': body,
            'data': data,
            'read': False,
            'createdAt': firestore.SERVER_TIMESTAMP,
        }
        _, notif_ref = await asyncio.to_thread(self.notifications.add, notification_data)
        logger.debug(f"Stored notification {notif_ref.id} for user {user_id}")
        return notif_ref.id

    async def find_read_notifications_before(self, cutoff: datetime) -> List:
        """
        Fetch read notifications created strictly before the cutoff.

        At most one batch worth is returned, so callers query again after
        deleting a full batch. Needs a composite index on (read, createdAt).

        Returns:
            List of document snapshots
        """
        query = (
            self.notifications
            .where(filter=FieldFilter('createdAt', '<', cutoff))
            .where(filter=FieldFilter('read', '==', True))
            .limit(MAX_BATCH_WRITES)
        )
        return await asyncio.to_thread(query.get)

    async def delete_all(self, snapshots: List) -> int:
        """
        Delete the given documents in a single atomic batch.

        Raises:
            ValueError: If there are more documents than one batch accepts
        """
        if not snapshots:
            return 0
        if len(snapshots) > MAX_BATCH_WRITES:
            raise ValueError(
                f"Cannot delete {len(snapshots)} documents in one batch (limit {MAX_BATCH_WRITES})"
            )

        batch = self.firestore_db.batch()
        for snapshot in snapshots:
            batch.delete(snapshot.reference)
        await asyncio.to_thread(batch.commit)
        return len(snapshots)

