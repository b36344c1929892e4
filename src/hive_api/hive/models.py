"""
Hive Models

Database models for hives, their secrets, messages and harvest subscribers.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel
from pydantic import ConfigDict

from hive_api.hive.enums import HiveMode


class Hive(BaseModel):
    """Hive database model."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    recipient_name: str
    mode: HiveMode
    reveal_at: Optional[datetime] = None  # Required when mode is reveal
    closes_at: datetime
    created_at: Optional[datetime] = None

    # Harvest markers, set together exactly once
    thank_you_message: Optional[str] = None
    harvested_at: Optional[datetime] = None
    harvest_notified_at: Optional[datetime] = None


class HiveSecrets(BaseModel):
    """Bearer tokens of a hive (1:1 with Hive)."""

    hive_id: UUID
    moderator_token: str
    recipient_token: str


class Message(BaseModel):
    """Message ("honey") submitted by a contributor."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    hive_id: UUID
    contributor_name: str
    message: str
    created_at: datetime


class HiveDraft(BaseModel):
    """Validated input for hive creation."""

    title: str
    recipient_name: str
    mode: HiveMode
    reveal_at: Optional[datetime] = None
    closes_at: datetime


def parse_hive_id(value) -> Optional[UUID]:
    """Return the hive id as a UUID, or None when the value cannot be one."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        return None
