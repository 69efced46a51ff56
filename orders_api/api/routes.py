"""
API routes for the orders service.

Routes are thin: parse the body, call the instrumented OrderService, shape
the response. Service errors (OrdersAPIError) propagate to the exception
handlers registered in main.py, which turn them into {"error": ...} bodies.

All handlers are `async def` without awaits, so each runs start-to-finish
on the event loop without interleaving with another request.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, generate_latest

from ..exceptions import OrdersAPIError
from .context import AppContext, get_context
from .schemas import (
    CreateOrderRequest,
    DeleteOrderResponse,
    ErrorResponse,
    HealthResponse,
    OrderResponse,
    SimulateRequest,
    SimulateResponse,
    UpdateOrderRequest,
)

# Create routers
orders_router = APIRouter(prefix="/api/orders", tags=["Orders"])
simulate_router = APIRouter(prefix="/api", tags=["Simulation"])
monitoring_router = APIRouter(tags=["Monitoring"])

_error_responses = {404: {"model": ErrorResponse}, 400: {"model": ErrorResponse}}


def parse_order_id(raw: str) -> Optional[int]:
    """Path ids that aren't integers can't match any order."""
    try:
        return int(raw)
    except ValueError:
        return None


# Order Routes
@orders_router.get("", response_model=List[OrderResponse])
async def list_orders(context: AppContext = Depends(get_context)):
    """Return every order in insertion order."""
    return [order.to_response() for order in context.service.list_orders()]


@orders_router.post(
    "",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**_error_responses, 500: {"model": ErrorResponse}},
)
async def create_order(
    payload: Optional[CreateOrderRequest] = None,
    context: AppContext = Depends(get_context),
):
    """
    Create an order.

    `customer` and `items` are required; `total` defaults to a random amount.
    """
    payload = payload or CreateOrderRequest()
    order = context.service.create_order(
        customer=payload.customer,
        items=payload.items,
        total=payload.total,
    )
    return order.to_response()


@orders_router.put("/{order_id}", response_model=OrderResponse, responses=_error_responses)
async def update_order(
    order_id: str,
    payload: Optional[UpdateOrderRequest] = None,
    context: AppContext = Depends(get_context),
):
    """Update an order's status. An empty body leaves the order unchanged."""
    payload = payload or UpdateOrderRequest()
    order = context.service.update_order(parse_order_id(order_id), payload.status)
    return order.to_response()


@orders_router.delete("/{order_id}", response_model=DeleteOrderResponse, responses=_error_responses)
async def delete_order(order_id: str, context: AppContext = Depends(get_context)):
    """Remove an order."""
    order = context.service.delete_order(parse_order_id(order_id))
    return {"message": "Deleted", "order": order.to_response()}


# Simulation Routes
@simulate_router.post("/simulate", response_model=SimulateResponse, responses=_error_responses)
async def simulate_traffic(
    payload: Optional[SimulateRequest] = None,
    context: AppContext = Depends(get_context),
):
    """Generate synthetic orders to drive telemetry (default 10)."""
    payload = payload or SimulateRequest()
    created = context.service.simulate_traffic(payload.count)
    return {
        "message": f"Created {created} simulated orders",
        "total": len(context.store),
    }


# Monitoring Routes
@monitoring_router.get("/health", response_model=HealthResponse)
async def health(context: AppContext = Depends(get_context)):
    """Liveness check. Not traced."""
    return {
        "status": "healthy",
        "uptime": context.uptime(),
        "orders": len(context.store),
    }


@monitoring_router.get("/metrics", responses={404: {"model": ErrorResponse}})
async def prometheus_metrics(context: AppContext = Depends(get_context)):
    """Prometheus exposition of the OTel metrics, when PROMETHEUS_ENABLED is set."""
    if not context.telemetry.config.prometheus_enabled:
        raise OrdersAPIError("Prometheus endpoint disabled", http_status=404)
    return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)
