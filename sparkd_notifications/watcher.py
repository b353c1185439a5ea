import asyncio
import concurrent.futures
import logging
from typing import Any, Dict, Optional, Set

from pydantic import ValidationError

from .events import EventBus, OrderUpdated
from .schemas import Order

logger = logging.getLogger(__name__)


class OrderWatcher:
    """
    Turns Firestore updates on the orders collection into OrderUpdated events.

    Firestore listeners only deliver the new document, so the watcher keeps
    the last status it saw of every order to use as the "before" snapshot.
    The initial snapshot only fills that cache. Listener callbacks arrive on
    a Firestore thread and are handed to the event loop as separate tasks.
    """

    def __init__(self, orders_collection, bus: EventBus, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.orders_collection = orders_collection
        self.bus = bus
        self.loop = loop
        self._last_status: Dict[str, Optional[str]] = {}
        self._pending: Set[concurrent.futures.Future] = set()
        self._initialized = False
        self._watch = None

    def start(self) -> None:
        if self._watch is not None:
            return
        if self.loop is None:
            self.loop = asyncio.get_running_loop()
        self._watch = self.orders_collection.on_snapshot(self.on_snapshot)
        logger.info("Listening for order updates")

    def stop(self) -> None:
        if self._watch is None:
            return
        self._watch.unsubscribe()
        self._watch = None
        logger.info("Stopped listening for order updates")

    def on_snapshot(self, col_snapshot, changes, read_time) -> None:
        """Firestore listener callback."""
        if not self._initialized:
            for doc in col_snapshot:
                self._last_status[doc.id] = (doc.to_dict() or {}).get("status")
            self._initialized = True
            logger.info(f"Loaded {len(self._last_status)} orders from initial snapshot")
            return

        for change in changes:
            doc = change.document
            change_type = change.type.name

            if change_type == "REMOVED":
                self._last_status.pop(doc.id, None)
                continue

            after_data = doc.to_dict() or {}
            known = doc.id in self._last_status
            before_status = self._last_status.get(doc.id)
            self._last_status[doc.id] = after_data.get("status")

            # New orders are not updates
            if change_type != "MODIFIED" or not known:
                continue

            event = self._to_event(doc.id, before_status, after_data)
            if event is not None:
                self._dispatch(event)

    def _dispatch(self, event: OrderUpdated) -> None:
        if self.loop.is_closed():
            logger.warning(f"Event loop closed, dropping update for order {event.order_id}")
            return
        future = asyncio.run_coroutine_threadsafe(self.bus.publish(event), self.loop)
        self._pending.add(future)
        future.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait for every update already handed to the loop to finish processing."""
        pending = list(self._pending)
        if not pending:
            return
        logger.info(f"Waiting for {len(pending)} order update(s) to finish")
        await asyncio.gather(*(asyncio.wrap_future(f) for f in pending), return_exceptions=True)

    @staticmethod
    def _to_event(order_id: str, before_status: Optional[str], after_data: Dict[str, Any]) -> Optional[OrderUpdated]:
        try:
            return OrderUpdated(
                order_id=order_id,
                before=Order(status=before_status),
                after=Order.model_validate(after_data),
            )
        except ValidationError as e:
            logger.error(f"Ignoring malformed update for order {order_id}: {str(e)}")
            return None
