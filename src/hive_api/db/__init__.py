"""Hive store: asyncpg pool, repositories and the store facade."""
