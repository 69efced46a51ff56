"""Order domain: records and the in-memory store."""
from .models import Order, OrderStatus
from .store import OrderStore

__all__ = ["Order", "OrderStatus", "OrderStore"]
