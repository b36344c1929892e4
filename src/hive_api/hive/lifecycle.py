"""
Hive Lifecycle

Derived state of a hive as pure functions of its timestamps and an explicit `now`.
Callers sample `now` once per request and pass the same value to every check.
"""

from datetime import datetime
from datetime import timezone
from typing import Optional

from hive_api.hive.enums import HiveMode
from hive_api.hive.enums import HiveState
from hive_api.hive.models import Hive


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a timestamp to aware UTC; naive values are taken to be UTC already."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_closed(hive: Hive, now: datetime) -> bool:
    """A hive is closed from closes_at onwards."""
    return as_utc(now) >= as_utc(hive.closes_at)


def is_revealed(hive: Hive, now: datetime) -> bool:
    """
    Live hives are always revealed; reveal hives from reveal_at onwards.

    A reveal hive without reveal_at is never revealed. Creation rejects that state,
    so it can only show up in rows written outside this service.
    """
    if hive.mode == HiveMode.LIVE:
        return True
    if hive.reveal_at is None:
        return False
    return as_utc(now) >= as_utc(hive.reveal_at)


def is_harvested(hive: Hive) -> bool:
    """harvest_notified_at is the idempotency anchor for harvest."""
    return hive.harvest_notified_at is not None


def harvest_state(hive: Hive, now: datetime) -> HiveState:
    """Position of the hive in the Open -> ClosedUnharvested -> Harvested machine."""
    if is_harvested(hive):
        return HiveState.HARVESTED
    if is_closed(hive, now):
        return HiveState.CLOSED_UNHARVESTED
    return HiveState.OPEN
