import logging

from ..events import OrderUpdated
from ..notification_writer import NotificationWriter
from ..status_mapper import map_status_change

logger = logging.getLogger(__name__)


class OrderStatusHandler:
    """Notifies the buyer (SME) and seller (Spark) as an order moves through its statuses."""

    def __init__(self, writer: NotificationWriter):
        self.writer = writer

    async def handle(self, event: OrderUpdated) -> None:
        """
        Create the notifications for an order update.

        Drafts are written one at a time in the mapper's order. Errors are
        logged, never raised; a failure part way through a cancellation
        leaves the earlier notification in place.

        Args:
            event: The order's before and after snapshots
        """
        order_id = event.order_id
        drafts = map_status_change(order_id, event.before.status, event.after)
        if not drafts:
            return

        logger.info(f"Order {order_id} moved {event.before.status} -> {event.after.status}, "
                    f"creating {len(drafts)} notification(s)")

        try:
            for draft in drafts:
                if not draft.userId:
                    logger.warning(f"Order {order_id} has no recipient for '{draft.title}', skipping")
                    continue
                await self.writer.create(draft.userId, draft.title, draft.body, draft.data)
        except Exception as e:
            logger.error(f"Error in order status change for order {order_id}: {str(e)}", exc_info=True)
