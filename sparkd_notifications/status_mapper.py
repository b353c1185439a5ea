"""
Decides which notifications an order status transition produces.

Nothing here touches Firestore; the order handler writes whatever comes back.
"""
from typing import List, Optional

from .schemas import NotificationDraft, NotificationKind, Order, OrderStatus

CANCELLED_TITLE = "Order Cancelled"

# status -> (recipient field on the order, title, body template)
STATUS_MESSAGES = {
    OrderStatus.PENDING_PAYMENT: (
        "smeID",
        "Order Accepted! 🎉",
        'Your order "{gig_title}" was accepted. Please complete payment to start work.',
    ),
    OrderStatus.IN_PROGRESS: (
        "sparkID",
        "Payment Received! 💰",
        'Payment received for "{gig_title}". You can now start working.',
    ),
    OrderStatus.DELIVERED: (
        "smeID",
        "Work Delivered! 📦",
        'Your order "{gig_title}" has been delivered. Please review.',
    ),
    OrderStatus.COMPLETED: (
        "sparkID",
        "Order Completed! ✅",
        'Order "{gig_title}" completed successfully!',
    ),
}


def parse_status(value: Optional[str]) -> Optional[OrderStatus]:
    try:
        return OrderStatus(value)
    except ValueError:
        return None


def map_status_change(order_id: str,
                      before_status: Optional[str],
                      after: Order) -> List[NotificationDraft]:
    """
    Map an order status transition to the notifications it should create.

    Args:
        order_id: The order's document ID
        before_status: Status before the update
        after: The order after the update

    Returns:
        Drafts in the order they must be written. Empty when the status did
        not change or is not one that notifies anybody.
    """
    if before_status == after.status:
        return []

    status = parse_status(after.status)
    if status is None:
        return []

    gig_title = after.gigTitle or ""

    if status == OrderStatus.CANCELLED:
        data = {"type": NotificationKind.ORDER_CANCELLED.value, "orderId": order_id}
        return [
            NotificationDraft(
                userId=after.smeID,
                title=CANCELLED_TITLE,
                body=f'Your order "{gig_title}" was cancelled.',
                data=dict(data),
            ),
            NotificationDraft(
                userId=after.sparkID,
                title=CANCELLED_TITLE,
                body=f'Order "{gig_title}" was cancelled.',
                data=dict(data),
            ),
        ]

    recipient_field, title, body = STATUS_MESSAGES[status]
    return [
        NotificationDraft(
            userId=getattr(after, recipient_field),
            title=title,
            body=body.format(gig_title=gig_title),
            data={
                "type": NotificationKind.ORDER_STATUS_CHANGE.value,
                "orderId": order_id,
                "status": status.value,
            },
        )
    ]
