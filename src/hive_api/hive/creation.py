"""Hive creation: validate, issue tokens, persist hive and secrets atomically."""

from typing import NamedTuple
from typing import Optional

from loguru import logger

from hive_api.hive.models import Hive
from hive_api.hive.tokens import HiveTokens
from hive_api.hive.tokens import issue_tokens
from hive_api.hive.validation import TimestampInput
from hive_api.hive.validation import validate_hive


class CreatedHive(NamedTuple):
    hive: Hive
    tokens: HiveTokens


async def create_hive(
    store,
    title: Optional[str],
    recipient_name: Optional[str],
    mode: Optional[str],
    reveal_at: TimestampInput,
    closes_at: TimestampInput,
) -> CreatedHive:
    """
    Create a hive and its secret pair.

    Validation runs before anything is written. The store writes the hive row and
    the secrets row in one transaction, so a hive never exists without its tokens.
    """
    draft = validate_hive(title, recipient_name, mode, reveal_at, closes_at)
    tokens = issue_tokens()

    hive = await store.create_hive(draft, tokens)

    logger.info(
        "Hive created",
        hive_id=str(hive.id),
        mode=hive.mode.value,
        closes_at=hive.closes_at,
        reveal_at=hive.reveal_at,
    )
    return CreatedHive(hive=hive, tokens=tokens)
