import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from ..store import MAX_BATCH_WRITES, FirestoreStore

logger = logging.getLogger(__name__)


class NotificationCleanupJob:
    """Deletes read notifications once they are older than the retention period."""

    def __init__(self, store: FirestoreStore, retention_days: int = 30):
        self.store = store
        self.retention = timedelta(days=retention_days)

    def cutoff(self, now: Optional[datetime] = None) -> datetime:
        now = now or datetime.now(timezone.utc)
        return now - self.retention

    async def run(self, now: Optional[datetime] = None) -> int:
        """
        Delete every read notification created before the cutoff.

        Unread notifications are kept no matter how old they are. Matches are
        deleted one batch at a time until a query comes back short of a full
        batch.

        Args:
            now: Reference time, defaults to the current UTC time

        Returns:
            Number of notifications deleted
        """
        cutoff = self.cutoff(now)
        deleted = 0
        try:
            while True:
                snapshots = await self.store.find_read_notifications_before(cutoff)
                deleted += await self.store.delete_all(snapshots)
                if len(snapshots) < MAX_BATCH_WRITES:
                    break
        except Exception as e:
            logger.error(f"Error cleaning up notifications older than {cutoff.isoformat()} "
                         f"after deleting {deleted}: {str(e)}", exc_info=True)
            return deleted

        logger.info(f"Deleted {deleted} old notifications")
        return deleted
