"""
Data models for orders.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field


class OrderStatus(str, Enum):
    """Statuses the service treats specially. Any other string is accepted as-is."""
    PENDING = "pending"
    COMPLETED = "completed"


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2025-01-06T10:00:00.000Z."""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


class Order(BaseModel):
    """A single order record."""
    id: int = Field(..., description="Unique, monotonically increasing identifier")
    customer: str
    items: Any = Field(..., description="Ordered items (free-form, usually a list of names)")
    total: Union[int, float]
    status: str = Field(default=OrderStatus.PENDING.value)
    created_at: str = Field(default_factory=utc_timestamp, alias="createdAt")

    model_config = ConfigDict(populate_by_name=True)

    @property
    def is_completed(self) -> bool:
        return self.status == OrderStatus.COMPLETED

    def to_response(self) -> dict:
        """JSON body shape: camelCase createdAt."""
        return self.model_dump(by_alias=True)
