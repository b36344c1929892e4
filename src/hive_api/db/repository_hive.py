"""
Hive Repository

Repository for hives and their secrets. A hive and its secrets row are only
ever written together, in one transaction.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from uuid import uuid4

import asyncpg

from hive_api.hive.models import Hive
from hive_api.hive.models import HiveDraft
from hive_api.hive.models import HiveSecrets
from hive_api.hive.tokens import HiveTokens

HIVE_COLUMNS = """
    id, title, recipient_name, mode, reveal_at, closes_at, created_at,
    thank_you_message, harvested_at, harvest_notified_at
"""


class HiveRepository:
    """Hive repository (hives + hive_secrets)."""

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def create_with_secrets(self, draft: HiveDraft, tokens: HiveTokens) -> Hive:
        """Insert the hive and its secret pair atomically."""
        hive_id = uuid4()

        async with self.pool.acquire() as conn:
            async with conn.transaction():
                row = await conn.fetchrow(
                    f"""
                    INSERT INTO hive.hives (id, title, recipient_name, mode, reveal_at, closes_at)
                    VALUES ($1, $2, $3, $4, $5, $6)
                    RETURNING {HIVE_COLUMNS}
                    """,
                    hive_id,
                    draft.title,
                    draft.recipient_name,
                    draft.mode.value,
                    draft.reveal_at,
                    draft.closes_at,
                )
                await conn.execute(
                    """
                    INSERT INTO hive.hive_secrets (hive_id, moderator_token, recipient_token)
                    VALUES ($1, $2, $3)
                    """,
                    hive_id,
                    tokens.moderator_token,
                    tokens.recipient_token,
                )

        return Hive(**dict(row))

    async def get(self, hive_id: UUID) -> Optional[Hive]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT {HIVE_COLUMNS} FROM hive.hives WHERE id = $1",
                hive_id,
            )
        return Hive(**dict(row)) if row else None

    async def get_secrets(self, hive_id: UUID) -> Optional[HiveSecrets]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                """
                SELECT hive_id, moderator_token, recipient_token
                FROM hive.hive_secrets
                WHERE hive_id = $1
                """,
                hive_id,
            )
        return HiveSecrets(**dict(row)) if row else None

    async def mark_harvested(self, hive_id: UUID, thank_you_message: str, now: datetime) -> bool:
        """
        Set the harvest markers if, and only if, they are still unset.

        Returns:
            True for the single caller whose update matched the row, False otherwise
        """
        async with self.pool.acquire() as conn:
            updated_id = await conn.fetchval(
                """
                UPDATE hive.hives
                SET thank_you_message = $2,
                    harvested_at = $3,
                    harvest_notified_at = $3
                WHERE id = $1
                  AND harvest_notified_at IS NULL
                RETURNING id
                """,
                hive_id,
                thank_you_message,
                now,
            )
        return updated_id is not None
