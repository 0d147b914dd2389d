"""Shared pytest configuration for the goal engine test suite."""
from __future__ import annotations

import asyncio
import sys
import threading
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Generator, List

import pytest
from aiohttp import web


# Ensure the repository root (which contains ``goal_engine``) is importable.
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from goal_engine.models import GoalDefinition, MetricKind, NotificationPolicy, PeriodKind  # noqa: E402


class RecordingSink:
    """Notification sink that remembers every emit call."""

    def __init__(self) -> None:
        self.calls: List[tuple] = []

    def emit(self, kind, metric, message, severity) -> None:
        self.calls.append((kind, metric, message, severity))

    def kinds(self) -> List[str]:
        return [kind.value for kind, *_ in self.calls]


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def january_orders_goal() -> GoalDefinition:
    return GoalDefinition(
        metric=MetricKind.ORDERS,
        target=100,
        period=PeriodKind.MONTHLY,
        start_date=date(2025, 1, 1),
        end_date=date(2025, 1, 31),
        created_at=datetime(2025, 1, 1, 9, 0),
        notifications=NotificationPolicy(),
    )


def _orders_app(orders: List[Dict[str, Any]], page_size: int) -> web.Application:
    async def list_orders(request: web.Request) -> web.Response:
        if request.query.get("fail") or request.headers.get("X-Fail"):
            return web.json_response({"error": "boom"}, status=500)
        date_from = request.query.get("date_from", "0000")
        date_to = request.query.get("date_to", "9999")
        page = int(request.query.get("page", "1"))
        matching = [o for o in orders if date_from <= o["createdAt"][:10] <= date_to]
        start = (page - 1) * page_size
        batch = matching[start:start + page_size]
        total_pages = max(1, -(-len(matching) // page_size))
        return web.json_response({
            "orders": batch,
            "pagination": {"page": page, "total_pages": total_pages},
        })

    app = web.Application()
    app.router.add_get("/api/orders", list_orders)
    return app


@pytest.fixture
def orders_api() -> Generator[Dict[str, Any], None, None]:
    """Serve a fake orders backend on 127.0.0.1 for HTTP repository tests.

    Tests append to ``orders_api["orders"]``; pages hold two records so the
    client's paging is exercised.
    """

    orders: List[Dict[str, Any]] = []
    loop = asyncio.new_event_loop()
    ready = threading.Event()
    state: Dict[str, Any] = {"orders": orders}

    def _run() -> None:
        asyncio.set_event_loop(loop)
        runner = web.AppRunner(_orders_app(orders, page_size=2))
        loop.run_until_complete(runner.setup())
        site = web.TCPSite(runner, host="127.0.0.1", port=0)
        loop.run_until_complete(site.start())
        sockets = site._server.sockets  # type: ignore[attr-defined]
        assert sockets, "aiohttp site did not expose any sockets"
        port = sockets[0].getsockname()[1]
        state["base_url"] = f"http://127.0.0.1:{port}/api"
        ready.set()
        try:
            loop.run_forever()
        finally:
            loop.run_until_complete(runner.cleanup())
            loop.close()

    thread = threading.Thread(target=_run, name="orders-test-server", daemon=True)
    thread.start()
    if not ready.wait(timeout=10):
        raise RuntimeError("Timed out starting orders test server")

    try:
        yield state
    finally:
        if loop.is_running():
            loop.call_soon_threadsafe(loop.stop)
        thread.join(timeout=5)
