import asyncio
import logging
import signal
import sys
from datetime import timedelta
from typing import Optional

from .config import Settings, settings
from .events import EventBus, NotificationCreated, OrderUpdated
from .firebase_client import FirebaseClient
from .handlers import OrderStatusHandler, PushDeliveryHandler
from .jobs import NotificationCleanupJob
from .logging_setup import setup_logging
from .notification_writer import NotificationWriter
from .scheduler import CleanupScheduler
from .watcher import OrderWatcher

logger = logging.getLogger(__name__)


class NotificationService:
    """Wires the handlers, the order watcher and the cleanup schedule together."""

    def __init__(self, config: Settings, firebase_client: FirebaseClient):
        self.config = config
        self.firebase = firebase_client

        store = firebase_client.store()
        self.bus = EventBus()
        self.writer = NotificationWriter(store, self.bus)

        order_handler = OrderStatusHandler(self.writer)
        push_handler = PushDeliveryHandler(store, firebase_client.push(), config.android_channel_id)
        self.bus.subscribe(OrderUpdated, order_handler.handle)
        self.bus.subscribe(NotificationCreated, push_handler.handle)

        self.watcher = OrderWatcher(
            firebase_client.firestore_db.collection(config.orders_collection),
            self.bus,
        )
        self.scheduler = CleanupScheduler(
            NotificationCleanupJob(store, config.notification_retention_days),
            timedelta(hours=config.cleanup_interval_hours),
            run_on_start=config.cleanup_on_startup,
        )
        logger.info("Notification service initialized")

    async def run(self, stop_event: asyncio.Event) -> None:
        """Run until stop_event is set."""
        self.watcher.start()
        scheduler_task = asyncio.create_task(self.scheduler.run())

        try:
            await stop_event.wait()
        finally:
            logger.info("Shutting down, stopping listeners...")
            self.watcher.stop()
            await self.watcher.drain()
            self.scheduler.stop()
            await scheduler_task


async def serve(config: Settings) -> None:
    stop_event = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    service = NotificationService(config, FirebaseClient(config))
    await service.run(stop_event)


def main(config: Optional[Settings] = None) -> int:
    """Main entry point for the application."""
    config = config or settings
    setup_logging(config)

    logger.info(f"Starting {config.service_name} in {config.environment} environment")

    try:
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        logger.info("Service stopped by keyboard interrupt")
    except Exception as e:
        logger.critical(f"Fatal error in notification service: {str(e)}", exc_info=True)
        return 1

    logger.info("Notification service has shut down gracefully")
    return 0


if __name__ == "__main__":
    sys.exit(main())
