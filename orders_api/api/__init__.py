"""HTTP layer: app factory, routes and request/response schemas."""
from .main import create_app

__all__ = ["create_app"]
