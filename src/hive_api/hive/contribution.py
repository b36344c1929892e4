"""
Contribution Gate

Who may write to a hive and who may read from it, and when.

Submission needs no token: knowing the hive id is the capability. Reading needs a
moderator or recipient token AND a revealed hive; the moderator gets no early look.
"""

import re
from datetime import datetime
from typing import List
from typing import NamedTuple
from typing import Optional
from uuid import UUID

from loguru import logger

from hive_api.errors import AlreadyHarvestedError
from hive_api.errors import HiveClosedError
from hive_api.errors import HiveNotFoundError
from hive_api.errors import HiveValidationError
from hive_api.errors import UnauthorizedError
from hive_api.hive.access import verify_access
from hive_api.hive.enums import Role
from hive_api.hive.lifecycle import is_closed
from hive_api.hive.lifecycle import is_harvested
from hive_api.hive.lifecycle import is_revealed
from hive_api.hive.models import Hive
from hive_api.hive.models import Message
from hive_api.hive.models import parse_hive_id

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class MessageListing(NamedTuple):
    """Messages visible to an authorized reader, newest first."""

    revealed: bool
    messages: List[Message]


def can_submit(hive: Hive, now: datetime) -> bool:
    return not is_closed(hive, now)


def can_read(role: Role, hive: Hive, now: datetime) -> bool:
    return role != Role.UNAUTHORIZED and is_revealed(hive, now)


async def get_existing_hive(store, hive_id: UUID | str) -> Hive:
    """Load a hive or raise HiveNotFoundError (malformed ids included)."""
    parsed_id = parse_hive_id(hive_id)
    hive = await store.get_hive(parsed_id) if parsed_id is not None else None
    if hive is None:
        raise HiveNotFoundError()
    return hive


async def submit_message(
    store,
    hive_id: UUID | str,
    contributor_name: Optional[str],
    message: Optional[str],
    now: datetime,
) -> UUID:
    """
    Append a message to an open hive.

    The store repeats the closure check inside the insert, so a hive that closes
    between the read below and the write still rejects the message.

    Returns
    -------
    UUID
        Id of the created message

    Raises
    ------
    HiveNotFoundError, HiveClosedError, HiveValidationError
    """
    hive = await get_existing_hive(store, hive_id)

    if not can_submit(hive, now):
        raise HiveClosedError()

    name = (contributor_name or "").strip()
    text = (message or "").strip()
    if not name or not text:
        raise HiveValidationError("Please add your name and a message before continuing.")

    message_id = await store.insert_message(hive.id, name, text, now)
    if message_id is None:
        raise HiveClosedError()

    logger.info("Honey added to hive", hive_id=str(hive.id), message_id=str(message_id))
    return message_id


async def list_messages(store, hive_id: UUID | str, token: Optional[str], now: datetime) -> MessageListing:
    """
    List a hive's messages for its moderator or recipient.

    An unrevealed hive yields an empty listing rather than an error, for both roles.

    Raises
    ------
    UnauthorizedError
        Missing or mismatched token, or unknown hive
    """
    role = await verify_access(store, hive_id, token)
    if role == Role.UNAUTHORIZED:
        raise UnauthorizedError()

    hive = await get_existing_hive(store, hive_id)
    if not can_read(role, hive, now):
        logger.debug("Messages hidden until reveal", hive_id=str(hive.id), role=role.value)
        return MessageListing(revealed=False, messages=[])

    messages = await store.list_messages(hive.id)
    return MessageListing(revealed=True, messages=messages)


async def subscribe_for_harvest_notice(store, hive_id: UUID | str, email: Optional[str]) -> None:
    """
    Register an email to receive the thank-you message when the hive is harvested.

    Raises
    ------
    HiveValidationError
        Blank or malformed email
    HiveNotFoundError
        Unknown hive
    AlreadyHarvestedError
        The harvest notice has already gone out
    """
    clean = (email or "").strip()
    if not clean:
        raise HiveValidationError("Please enter an email address.")
    if not EMAIL_PATTERN.match(clean):
        raise HiveValidationError("Please enter a valid email address.")

    hive = await get_existing_hive(store, hive_id)
    if is_harvested(hive):
        raise AlreadyHarvestedError("This Hive has already been harvested.")

    # the store re-checks the harvest marker inside the insert
    subscriber_id = await store.add_subscriber(hive.id, clean)
    if subscriber_id is None:
        raise AlreadyHarvestedError("This Hive has already been harvested.")

    logger.info("Harvest subscriber registered", hive_id=str(hive.id))
