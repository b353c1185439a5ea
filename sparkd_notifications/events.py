import logging
from collections import defaultdict
from typing import Any, Awaitable, Callable, Dict, List, Type

from pydantic import BaseModel

from .schemas import Notification, Order

logger = logging.getLogger(__name__)


class OrderUpdated(BaseModel):
    """An `orders/{orderId}` document was updated."""
    order_id: str
    before: Order
    after: Order


class NotificationCreated(BaseModel):
    """A `notifications/{id}` document was created."""
    notification_id: str
    notification: Notification


Handler = Callable[[Any], Awaitable[Any]]


class EventBus:
    """
    In-process publish/subscribe for the service's events.

    Subscribers of one event run one after another, each awaited before the
    next starts. A subscriber that raises is logged and does not stop the
    rest.
    """

    def __init__(self):
        self._handlers: Dict[Type[BaseModel], List[Handler]] = defaultdict(list)

    def subscribe(self, event_type: Type[BaseModel], handler: Handler) -> None:
        self._handlers[event_type].append(handler)
        logger.debug(f"Subscribed {getattr(handler, '__qualname__', handler)} to {event_type.__name__}")

    async def publish(self, event: BaseModel) -> None:
        handlers = self._handlers.get(type(event), [])
        if not handlers:
            logger.debug(f"No subscribers for {type(event).__name__}")
            return

        for handler in handlers:
            try:
                await handler(event)
            except Exception as e:
                logger.error(f"Subscriber failed on {type(event).__name__}: {str(e)}", exc_info=True)
