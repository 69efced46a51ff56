"""
Application context.

Everything a request handler needs that lives for the whole process: the
order store, the instruments, the instrumented service and the telemetry
handle. Built once by create_app() and stored on app.state; handlers reach it
through the get_context dependency instead of module globals.
"""

import time
from dataclasses import dataclass, field

from fastapi import Request

from ..config import Settings
from ..observability.instrumentation import Telemetry
from ..observability.metrics import OrderMetrics
from ..orders.service import OrderService
from ..orders.store import OrderStore


@dataclass
class AppContext:
    settings: Settings
    telemetry: Telemetry
    store: OrderStore
    metrics: OrderMetrics
    service: OrderService
    started_at: float = field(default_factory=time.monotonic)

    def uptime(self) -> float:
        """Seconds since the context was built."""
        return time.monotonic() - self.started_at


def get_context(request: Request) -> AppContext:
    return request.app.state.context
