"""
Order Repository Adapters
Date-range order queries used by the progress evaluator
"""

from __future__ import annotations

import asyncio
import logging
import os
from datetime import date, datetime, time
from typing import Any, Dict, Iterable, List, Optional

import requests

LOGGER = logging.getLogger(__name__)


class OrderRepositoryError(RuntimeError):
    """Raised when orders cannot be fetched."""


def _parse_created_at(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed.replace(tzinfo=None)
    return None


class OrderApiClient:
    """Client for the orders endpoint of the shop backend"""

    def __init__(self, base_url: str = None, api_token: str = None,
                 timeout: float = None, page_limit: int = None,
                 session: requests.Session = None):
        """
        Initialize orders API client

        Args:
            base_url: Backend base URL (default: ORDERS_API_URL)
            api_token: Optional bearer token (default: ORDERS_API_TOKEN)
            timeout: Request timeout in seconds
            page_limit: Records requested per page
            session: Optional requests session to reuse
        """
        self.base_url = (base_url or os.environ.get('ORDERS_API_URL', 'http://localhost:5000/api')).rstrip('/')
        self.api_token = api_token or os.environ.get('ORDERS_API_TOKEN')
        self.timeout = timeout or float(os.environ.get('ORDERS_API_TIMEOUT', 10))
        self.page_limit = page_limit or int(os.environ.get('ORDERS_PAGE_LIMIT', 10000))
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        headers = {'Accept': 'application/json'}
        if self.api_token:
            headers['Authorization'] = f'Bearer {self.api_token}'
        return headers

    def get_orders(self, date_from: date, date_to: date) -> List[Dict[str, Any]]:
        """
        Fetch every order created between two dates (inclusive)

        Follows the page counter while the backend reports more pages.
        """
        orders: List[Dict[str, Any]] = []
        page = 1
        while True:
            response = self.session.get(
                f"{self.base_url}/orders",
                params={
                    'date_from': date_from.isoformat(),
                    'date_to': date_to.isoformat(),
                    'limit': self.page_limit,
                    'page': page,
                },
                headers=self._headers(),
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
            batch = payload.get('orders') or []
            orders.extend(batch)

            pagination = payload.get('pagination') or {}
            total_pages = pagination.get('total_pages') or pagination.get('totalPages')
            has_more = pagination.get('has_more', pagination.get('hasMore'))
            if has_more is None and total_pages is not None:
                has_more = page < int(total_pages)
            if not has_more or not batch:
                break
            page += 1

        LOGGER.debug("Fetched %d orders for %s..%s", len(orders), date_from, date_to)
        return orders


class HttpOrderRepository:
    """Coroutine-friendly repository over the blocking orders API client."""

    def __init__(self, client: Optional[OrderApiClient] = None) -> None:
        self.client = client or OrderApiClient()

    async def query_orders(self, date_from: date, date_to: date) -> List[Dict[str, Any]]:
        try:
            return await asyncio.to_thread(self.client.get_orders, date_from, date_to)
        except (requests.RequestException, ValueError) as exc:
            LOGGER.error("Order query %s..%s failed: %s", date_from, date_to, exc)
            raise OrderRepositoryError("Order query failed") from exc


class InMemoryOrderRepository:
    """Serves orders from a list, filtering on ``createdAt``."""

    def __init__(self, orders: Optional[Iterable[Dict[str, Any]]] = None) -> None:
        self.orders: List[Dict[str, Any]] = list(orders or [])

    def add(self, order: Dict[str, Any]) -> None:
        self.orders.append(order)

    async def query_orders(self, date_from: date, date_to: date) -> List[Dict[str, Any]]:
        start = datetime.combine(date_from, time.min)
        end = datetime.combine(date_to, time.max)
        matching = []
        for order in self.orders:
            created_at = _parse_created_at(order.get('createdAt'))
            if created_at is not None and start <= created_at <= end:
                matching.append(order)
        return matching
