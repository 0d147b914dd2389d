#!/usr/bin/env python3
"""
Goal Engine Worker
Long-running process that evaluates goals on a recurring timer
"""

import asyncio
import logging
from datetime import timedelta

from .config import EngineSettings
from .engine import GoalEngine
from .notifications import LoggingNotificationSink, NotificationDispatcher, WebhookNotificationSink
from .order_repository import HttpOrderRepository, OrderApiClient
from .progress import ProgressEvaluator
from .scheduler import EvaluationScheduler
from .store import InMemoryGoalStore, PostgresGoalStore

logger = logging.getLogger(__name__)


def build_engine(settings: EngineSettings) -> GoalEngine:
    """Wire store, repository, sink and engine from settings"""
    if settings.goal_store == "postgres":
        store = PostgresGoalStore(settings.db_params)
    else:
        logger.warning("Using in-memory goal store, goals will not survive a restart")
        store = InMemoryGoalStore()

    client = OrderApiClient(
        base_url=settings.orders_api_url,
        api_token=settings.orders_api_token,
        timeout=settings.orders_api_timeout,
        page_limit=settings.orders_page_limit,
    )
    evaluator = ProgressEvaluator(HttpOrderRepository(client))

    if settings.notification_webhook_url:
        sink = WebhookNotificationSink(settings.notification_webhook_url)
    else:
        sink = LoggingNotificationSink()

    dispatcher = NotificationDispatcher(
        store,
        sink,
        refire_after=timedelta(hours=settings.milestone_refire_hours),
        throttle_warnings=settings.throttle_warnings,
    )
    return GoalEngine(store, evaluator, dispatcher)


async def run(settings: EngineSettings) -> None:
    engine = build_engine(settings)
    scheduler = EvaluationScheduler(engine, interval_seconds=settings.cycle_interval)
    scheduler.start()
    try:
        # Run until cancelled
        await asyncio.Event().wait()
    finally:
        await scheduler.stop()


def main():
    """Main worker loop"""
    settings = EngineSettings.from_environment()
    logging.basicConfig(level=settings.log_level, format='%(asctime)s - %(levelname)s - %(message)s')
    logger.info("Starting goal engine worker")

    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        logger.info("Goal engine worker shutting down...")


if __name__ == "__main__":
    main()
