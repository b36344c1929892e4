"""
Message Repository

Repository for contributor messages (append-only table).
"""

from datetime import datetime
from typing import List
from typing import Optional
from uuid import UUID
from uuid import uuid4

import asyncpg

from hive_api.hive.models import Message


class MessageRepository:
    """Message repository (append-only)."""

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def create_if_open(
        self,
        hive_id: UUID,
        contributor_name: str,
        message: str,
        now: datetime,
    ) -> Optional[UUID]:
        """
        Insert a message only while the hive is open.

        The closure predicate is part of the INSERT, so the durable write itself
        refuses messages for a closed (or missing) hive.

        Returns:
            The new message id, or None when the hive is closed or missing
        """
        async with self.pool.acquire() as conn:
            return await conn.fetchval(
                """
                INSERT INTO hive.messages (id, hive_id, contributor_name, message, created_at)
                SELECT $1, h.id, $3, $4, $5
                FROM hive.hives h
                WHERE h.id = $2
                  AND h.closes_at > $5
                RETURNING id
                """,
                uuid4(),
                hive_id,
                contributor_name,
                message,
                now,
            )

    async def list_for_hive(self, hive_id: UUID) -> List[Message]:
        """All messages of a hive, newest first."""
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT id, hive_id, contributor_name, message, created_at
                FROM hive.messages
                WHERE hive_id = $1
                ORDER BY created_at DESC, id
                """,
                hive_id,
            )
        return [Message(**dict(row)) for row in rows]

    async def count_for_hive(self, hive_id: UUID) -> int:
        async with self.pool.acquire() as conn:
            return await conn.fetchval(
                "SELECT COUNT(*) FROM hive.messages WHERE hive_id = $1",
                hive_id,
            )
