"""
Hive Store Connection Pool

Manages the asyncpg connection pool for the hive store.
Runs schema.sql on initialization (all DDL is idempotent) and verifies the
expected tables exist afterwards.

Schema Evolution:
-----------------
When adding/removing/renaming tables in schema.sql:
1. Update the schema.sql file with new DDL
2. Update HiveDBPool.EXPECTED_TABLES with the new table names
"""

from pathlib import Path
from typing import Optional

import asyncpg
from loguru import logger

SCHEMA_NAME = "hive"
SCHEMA_PATH = Path(__file__).parent / "schema.sql"


class HiveDBPool:
    """Hive store connection pool manager."""

    EXPECTED_TABLES = {
        "hives",
        "hive_secrets",
        "messages",
        "harvest_subscribers",
    }

    def __init__(self, connection_string: str, min_size: int = 2, max_size: int = 10):
        """
        Initialize hive store pool.

        Args:
            connection_string: PostgreSQL connection string for the hive store
            min_size: Minimum pooled connections
            max_size: Maximum pooled connections
        """
        self.connection_string = connection_string
        self.min_size = min_size
        self.max_size = max_size
        self.pool: Optional[asyncpg.Pool] = None
        self._pool_initialized = False

    async def initialize(self) -> None:
        """Create the pool, validate it and run migrations."""
        if self._pool_initialized and self.pool is not None:
            logger.debug("Hive DB pool already initialized")
            return

        try:
            logger.info("Initializing hive store database pool")

            self.pool = await asyncpg.create_pool(
                self.connection_string,
                min_size=self.min_size,
                max_size=self.max_size,
                command_timeout=30,  # Query timeout (seconds)
                timeout=15,  # Connection timeout (seconds)
            )

            async with self.pool.acquire() as conn:
                result = await conn.fetchval("SELECT 1")
                if result != 1:
                    raise RuntimeError("Pool validation query failed")

            logger.info("Hive DB pool validated")

            await self._run_migrations()

            self._pool_initialized = True
            logger.success("Hive store database initialized successfully")

        except Exception as e:
            logger.opt(exception=True).error("Failed to initialize hive DB pool: {}", e)
            if self.pool:
                await self.pool.close()
                self.pool = None
            raise

    async def _run_migrations(self) -> None:
        """Execute schema.sql and verify that every expected table exists."""
        schema_sql = SCHEMA_PATH.read_text(encoding="utf-8")

        async with self.pool.acquire() as conn:
            await conn.execute(schema_sql)

            rows = await conn.fetch(
                """
                SELECT table_name
                FROM information_schema.tables
                WHERE table_schema = $1
                """,
                SCHEMA_NAME,
            )
            existing_tables = {row["table_name"] for row in rows}

        missing_tables = self.EXPECTED_TABLES - existing_tables
        if missing_tables:
            logger.error(
                f"Hive schema incomplete after migration. Missing: {missing_tables}. "
                f"Existing: {sorted(existing_tables)}"
            )
            raise RuntimeError(f"Migration incomplete: missing tables {missing_tables}")

        logger.success(f"All {len(self.EXPECTED_TABLES)} hive tables verified")

    async def close(self) -> None:
        """Close the connection pool gracefully."""
        if self.pool:
            logger.info("Closing hive store database pool")
            await self.pool.close()
            self.pool = None
            self._pool_initialized = False

    async def health_check(self) -> bool:
        """
        Check if database connection is healthy.

        Returns:
            True if connection is healthy, False otherwise
        """
        try:
            if not self.pool:
                return False

            async with self.pool.acquire() as conn:
                result = await conn.fetchval("SELECT 1")
                return result == 1
        except Exception as e:
            logger.error(f"Hive DB health check failed: {e}")
            return False
