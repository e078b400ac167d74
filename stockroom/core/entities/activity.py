"""Activity log entities."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from stockroom.core.entities.ledger import utc_now


class ActivityAction(str, Enum):
    """Verbs recorded in the activity log."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    ISSUED = "issued"
    RETURNED = "returned"


class ActivityLogEntry(BaseModel):
    """Append-only audit record of an entity mutation."""

    id: int | None = None
    actor_id: str | None = None
    action: str
    entity_type: str  # e.g. "stock_item", "category"
    entity_id: int | None = None
    details: dict[str, Any] | None = None
    created_at: datetime = Field(default_factory=utc_now)
