"""Environment-driven settings for the goal engine worker."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


@dataclass
class EngineSettings:
    """Settings for the order API, the goal store and the evaluation cycle."""

    orders_api_url: str = "http://localhost:5000/api"
    orders_api_token: Optional[str] = None
    orders_api_timeout: float = 10.0
    orders_page_limit: int = 10000
    goal_store: str = "memory"
    db_params: Dict[str, Any] = field(default_factory=dict)
    cycle_interval: int = 60
    milestone_refire_hours: float = 24.0
    throttle_warnings: bool = True
    notification_webhook_url: Optional[str] = None
    log_level: str = "INFO"

    @classmethod
    def from_environment(cls) -> "EngineSettings":
        goal_store = os.getenv("GOAL_STORE", "memory").lower()
        if goal_store not in {"memory", "postgres"}:
            raise ValueError(f"GOAL_STORE must be 'memory' or 'postgres', got {goal_store!r}")
        return cls(
            orders_api_url=os.getenv("ORDERS_API_URL", "http://localhost:5000/api"),
            orders_api_token=os.getenv("ORDERS_API_TOKEN"),
            orders_api_timeout=float(os.getenv("ORDERS_API_TIMEOUT", "10")),
            orders_page_limit=int(os.getenv("ORDERS_PAGE_LIMIT", "10000")),
            goal_store=goal_store,
            db_params={
                "host": os.getenv("DB_HOST", "localhost"),
                "port": int(os.getenv("DB_PORT", "5432")),
                "database": os.getenv("DB_NAME", "goal_engine"),
                "user": os.getenv("DB_USER", "goal_engine"),
                "password": os.getenv("DB_PASSWORD", ""),
            },
            cycle_interval=int(os.getenv("GOAL_CYCLE_INTERVAL", "60")),
            milestone_refire_hours=float(os.getenv("MILESTONE_REFIRE_HOURS", "24")),
            throttle_warnings=_env_bool("THROTTLE_WARNINGS", True),
            notification_webhook_url=os.getenv("NOTIFICATION_WEBHOOK_URL") or None,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
