"""
Harvest Orchestrator

Closes out a hive exactly once: records the thank-you message and notifies the
contributors who opted in.

State machine per hive: OPEN -> CLOSED_UNHARVESTED -> HARVESTED (terminal).

The harvest markers are written with a conditional update guarded by
`harvest_notified_at IS NULL` BEFORE any email is sent. Of N concurrent callers
exactly one update matches a row; the rest get AlreadyHarvestedError. A crash
mid fan-out leaves the hive harvested, so a retry cannot send a second batch:
at most one batch, possibly partial.
"""

import asyncio
from datetime import datetime
from typing import Iterable
from typing import List
from typing import NamedTuple
from typing import Optional
from uuid import UUID

from loguru import logger

from hive_api.errors import AlreadyHarvestedError
from hive_api.errors import HiveValidationError
from hive_api.errors import NotClosedError
from hive_api.errors import UnauthorizedError
from hive_api.hive.access import verify_access
from hive_api.hive.contribution import get_existing_hive
from hive_api.hive.enums import Role
from hive_api.hive.lifecycle import is_closed
from hive_api.hive.lifecycle import is_harvested
from hive_api.hive.models import Hive
from hive_api.notifications.notifier import Notifier

DEFAULT_NOTIFICATION_TIMEOUT_SECONDS = 10.0


class HarvestResult(NamedTuple):
    """Outcome of a successful harvest."""

    sent_count: int  # Confirmed deliveries
    attempted_count: int  # Distinct addresses notified


class HarvestNotice(NamedTuple):
    subject: str
    body: str


def unique_emails(emails: Iterable[Optional[str]]) -> List[str]:
    """Trim, drop blanks and dedupe case-insensitively, keeping first spelling and order."""
    seen = set()
    result = []
    for email in emails:
        clean = (email or "").strip()
        if not clean or clean.lower() in seen:
            continue
        seen.add(clean.lower())
        result.append(clean)
    return result


def hive_link(site_url: str, hive_id: UUID) -> str:
    return f"{site_url.rstrip('/')}/hive/{hive_id}"


def build_harvest_notice(hive: Hive, thank_you_message: str, site_url: str) -> HarvestNotice:
    """Compose the email sent to every subscriber."""
    subject = f"A thank-you from {hive.recipient_name}"
    body = (
        f"{hive.recipient_name} has harvested the Hive \"{hive.title}\" and sent a thank-you "
        f"to everyone who contributed:\n\n"
        f"{thank_you_message}\n\n"
        f"Visit the Hive: {hive_link(site_url, hive.id)}\n"
    )
    return HarvestNotice(subject=subject, body=body)


async def _deliver(notifier: Notifier, email: str, notice: HarvestNotice, timeout: float) -> bool:
    """Deliver one notice; failures are logged and reported as False."""
    try:
        await asyncio.wait_for(notifier.notify(email, notice.subject, notice.body), timeout=timeout)
        return True
    except asyncio.TimeoutError:
        logger.warning("Harvest notice timed out", timeout_seconds=timeout)
    except Exception as e:  # pylint: disable=broad-except
        logger.warning(f"Harvest notice delivery failed: {type(e).__name__}: {e}")
    return False


async def send_harvest_notices(
    notifier: Notifier,
    emails: List[str],
    notice: HarvestNotice,
    timeout: float = DEFAULT_NOTIFICATION_TIMEOUT_SECONDS,
) -> int:
    """Fan out one notice per address concurrently. Returns the number delivered."""
    if not emails:
        return 0
    outcomes = await asyncio.gather(*(_deliver(notifier, email, notice, timeout) for email in emails))
    return sum(1 for delivered in outcomes if delivered)


async def harvest(
    store,
    notifier: Notifier,
    hive_id: UUID | str,
    token: Optional[str],
    thank_you_message: Optional[str],
    now: datetime,
    site_url: str,
    timeout: float = DEFAULT_NOTIFICATION_TIMEOUT_SECONDS,
) -> HarvestResult:
    """
    Harvest a closed hive and notify its subscribers.

    Preconditions, checked in order (the first failure wins):
    1. hive exists                  -> HiveNotFoundError
    2. hive is closed               -> NotClosedError
    3. token is moderator/recipient -> UnauthorizedError
    4. thank-you is not blank       -> HiveValidationError
    5. hive not yet harvested       -> AlreadyHarvestedError

    Closure is public (see get_hive_overview), so it is reported whatever the token.

    Returns
    -------
    HarvestResult
        Deliveries confirmed and addresses attempted
    """
    hive = await get_existing_hive(store, hive_id)

    if not is_closed(hive, now):
        raise NotClosedError()

    role = await verify_access(store, hive.id, token)
    if role == Role.UNAUTHORIZED:
        raise UnauthorizedError()

    message = (thank_you_message or "").strip()
    if not message:
        raise HiveValidationError("Please write a thank-you message first.")

    if is_harvested(hive):
        raise AlreadyHarvestedError()

    # Idempotency barrier: only one caller can flip harvest_notified_at from NULL
    marked = await store.mark_harvested(hive.id, message, now)
    if not marked:
        logger.info("Concurrent harvest lost the race", hive_id=str(hive.id))
        raise AlreadyHarvestedError()

    logger.info("Hive harvested", hive_id=str(hive.id), harvested_by=role.value)

    emails = unique_emails(await store.list_subscriber_emails(hive.id))
    notice = build_harvest_notice(hive, message, site_url)
    sent_count = await send_harvest_notices(notifier, emails, notice, timeout)

    logger.info(
        "Harvest notices sent",
        hive_id=str(hive.id),
        attempted=len(emails),
        sent=sent_count,
    )
    return HarvestResult(sent_count=sent_count, attempted_count=len(emails))
