"""
Hive Store

The persistence facade used by the hive domain. Delegates to one repository per
table and turns infrastructure failures into StoreError, so callers can tell
"the request was invalid" apart from "the store is unavailable".
"""

import asyncio
import functools
from datetime import datetime
from typing import List
from typing import Optional
from uuid import UUID

import asyncpg
from loguru import logger

from hive_api.db.pool import HiveDBPool
from hive_api.db.repository_hive import HiveRepository
from hive_api.db.repository_message import MessageRepository
from hive_api.db.repository_subscriber import SubscriberRepository
from hive_api.errors import StoreError
from hive_api.hive.models import Hive
from hive_api.hive.models import HiveDraft
from hive_api.hive.models import HiveSecrets
from hive_api.hive.models import Message
from hive_api.hive.tokens import HiveTokens

STORE_FAILURES = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    asyncio.TimeoutError,
)


def translate_store_errors(func):
    """Re-raise asyncpg/network failures of a store call as StoreError."""

    @functools.wraps(func)
    async def wrapper(self, *args, **kwargs):
        try:
            return await func(self, *args, **kwargs)
        except STORE_FAILURES as e:
            logger.error(f"Hive store call failed: {func.__name__}: {type(e).__name__}: {e}")
            raise StoreError(f"{func.__name__} failed: {type(e).__name__}") from e

    return wrapper


class HiveStore:
    """Durable record of hives, secrets, messages and harvest subscribers."""

    def __init__(self, db_pool: Optional[HiveDBPool]):
        self.db_pool = db_pool

    @property
    def pool(self) -> asyncpg.Pool:
        if self.db_pool is None or self.db_pool.pool is None:
            raise StoreError("Hive store not initialized")
        return self.db_pool.pool

    @translate_store_errors
    async def create_hive(self, draft: HiveDraft, tokens: HiveTokens) -> Hive:
        return await HiveRepository(self.pool).create_with_secrets(draft, tokens)

    @translate_store_errors
    async def get_hive(self, hive_id: UUID) -> Optional[Hive]:
        return await HiveRepository(self.pool).get(hive_id)

    @translate_store_errors
    async def get_secrets(self, hive_id: UUID) -> Optional[HiveSecrets]:
        return await HiveRepository(self.pool).get_secrets(hive_id)

    @translate_store_errors
    async def mark_harvested(self, hive_id: UUID, thank_you_message: str, now: datetime) -> bool:
        return await HiveRepository(self.pool).mark_harvested(hive_id, thank_you_message, now)

    @translate_store_errors
    async def insert_message(
        self,
        hive_id: UUID,
        contributor_name: str,
        message: str,
        now: datetime,
    ) -> Optional[UUID]:
        return await MessageRepository(self.pool).create_if_open(hive_id, contributor_name, message, now)

    @translate_store_errors
    async def list_messages(self, hive_id: UUID) -> List[Message]:
        return await MessageRepository(self.pool).list_for_hive(hive_id)

    @translate_store_errors
    async def count_messages(self, hive_id: UUID) -> int:
        return await MessageRepository(self.pool).count_for_hive(hive_id)

    @translate_store_errors
    async def add_subscriber(self, hive_id: UUID, email: str) -> Optional[UUID]:
        return await SubscriberRepository(self.pool).create_if_not_harvested(hive_id, email)

    @translate_store_errors
    async def list_subscriber_emails(self, hive_id: UUID) -> List[str]:
        return await SubscriberRepository(self.pool).list_emails(hive_id)
