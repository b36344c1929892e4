"""
Hive Enums

Enum types used throughout the hive domain.
Values must match exactly with database constraints.
"""

from enum import Enum


class HiveMode(str, Enum):
    """Message visibility policy of a hive."""

    LIVE = "live"  # Messages visible as soon as they are submitted
    REVEAL = "reveal"  # Messages hidden until reveal_at


class Role(str, Enum):
    """Role granted by a presented bearer token."""

    MODERATOR = "moderator"
    RECIPIENT = "recipient"
    UNAUTHORIZED = "unauthorized"


class HiveState(str, Enum):
    """Harvest lifecycle state derived from timestamps."""

    OPEN = "open"
    CLOSED_UNHARVESTED = "closed_unharvested"
    HARVESTED = "harvested"  # Terminal
