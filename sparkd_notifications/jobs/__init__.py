from .cleanup import NotificationCleanupJob

__all__ = ["NotificationCleanupJob"]
