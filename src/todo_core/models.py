from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# PUBLIC_INTERFACE
class Todo(BaseModel):
    """
    The single business entity of the store.

    Fields:
    - id: UUID4 string minted on creation, never changed afterwards
    - title: display text, stored exactly as submitted
    - is_completed: completion flag, flipped by toggle
    - created_at: creation timestamp (UTC), preserved across updates

    Instances are frozen; stores produce changed copies with `model_copy`.
    The title is deliberately not validated here, the store checks it at the
    write boundary.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique identifier of the todo item")
    title: str = Field(..., description="Title of the todo item")
    is_completed: bool = Field(default=False, description="Completion status flag")
    created_at: Optional[datetime] = Field(default=None, description="Creation timestamp")
