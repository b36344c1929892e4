"""Validation of hive creation input."""

from datetime import datetime
from typing import Optional
from typing import Union

from hive_api.errors import HiveValidationError
from hive_api.hive.enums import HiveMode
from hive_api.hive.lifecycle import as_utc
from hive_api.hive.models import HiveDraft

TimestampInput = Union[str, datetime, None]


def parse_timestamp(value: TimestampInput, field_name: str) -> datetime:
    """
    Parse an ISO-8601 timestamp into aware UTC.

    Raises
    ------
    HiveValidationError
        If the value is missing or not a timestamp
    """
    if isinstance(value, datetime):
        try:
            return as_utc(value)
        except OverflowError:
            raise HiveValidationError(f"{field_name} is out of range.") from None

    if value is None or not str(value).strip():
        raise HiveValidationError(f"Missing {field_name}.")

    text = str(value).strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    try:
        return as_utc(datetime.fromisoformat(text))
    except (ValueError, OverflowError):
        raise HiveValidationError(f"{field_name} is not a valid timestamp.") from None


def validate_hive(
    title: Optional[str],
    recipient_name: Optional[str],
    mode: Optional[str],
    reveal_at: TimestampInput,
    closes_at: TimestampInput,
) -> HiveDraft:
    """
    Validate hive creation input and return the normalized draft.

    - title and recipient_name must be non-empty after trimming
    - mode must be live or reveal
    - closes_at must be present and parseable
    - reveal mode requires a parseable reveal_at; live mode discards it

    No ordering is imposed between reveal_at and closes_at.
    """
    title = (title or "").strip()
    recipient_name = (recipient_name or "").strip()
    if not title or not recipient_name:
        raise HiveValidationError("Missing title or recipient name.")

    try:
        hive_mode = HiveMode((mode or "").strip().lower())
    except ValueError:
        raise HiveValidationError("Mode must be 'live' or 'reveal'.") from None

    closes_at_value = parse_timestamp(closes_at, "closesAt")

    reveal_at_value = None
    if hive_mode == HiveMode.REVEAL:
        if reveal_at is None or (isinstance(reveal_at, str) and not reveal_at.strip()):
            raise HiveValidationError("Reveal mode requires revealAt.")
        reveal_at_value = parse_timestamp(reveal_at, "revealAt")

    return HiveDraft(
        title=title,
        recipient_name=recipient_name,
        mode=hive_mode,
        reveal_at=reveal_at_value,
        closes_at=closes_at_value,
    )
