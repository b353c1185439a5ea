from .order_status import OrderStatusHandler
from .push_delivery import PushDeliveryHandler

__all__ = ["OrderStatusHandler", "PushDeliveryHandler"]
