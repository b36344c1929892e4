"""
Harvest Subscriber Repository

Repository for harvest notice opt-ins (append-only table).
"""

from typing import List
from typing import Optional
from uuid import UUID
from uuid import uuid4

import asyncpg


class SubscriberRepository:
    """Harvest subscriber repository (append-only)."""

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def create_if_not_harvested(self, hive_id: UUID, email: str) -> Optional[UUID]:
        """
        Register a subscriber only while the hive's harvest notice is still pending.

        The hive row is share-locked by the insert, so a concurrent harvest either
        waits for this subscriber to commit (and then notifies it) or marks the
        hive first (and the insert matches no row).

        Returns:
            The new subscriber id, or None when the hive is harvested or missing
        """
        async with self.pool.acquire() as conn:
            return await conn.fetchval(
                """
                INSERT INTO hive.harvest_subscribers (id, hive_id, email, created_at)
                SELECT $1, h.id, $3, NOW()
                FROM hive.hives h
                WHERE h.id = $2
                  AND h.harvest_notified_at IS NULL
                FOR SHARE OF h
                RETURNING id
                """,
                uuid4(),
                hive_id,
                email,
            )

    async def list_emails(self, hive_id: UUID) -> List[str]:
        """Raw subscriber emails in registration order (duplicates included)."""
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT email
                FROM hive.harvest_subscribers
                WHERE hive_id = $1
                ORDER BY created_at, id
                """,
                hive_id,
            )
        return [row["email"] for row in rows]
