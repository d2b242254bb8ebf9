"""
Control Database Connection Pool

Manages the asyncpg connection pool for the control database holding work items
and project records. Creates the provisioning schema on first start.

Schema Evolution:
-----------------
When adding/removing/renaming tables in schema.sql:
1. Update the schema.sql file with new DDL
2. Update ControlDBPool.EXPECTED_TABLES with the new table names
3. For existing deployments, migrate manually or drop and recreate the schema:
   DROP SCHEMA provisioning CASCADE;
"""

from pathlib import Path
from typing import Optional

import asyncpg
from loguru import logger

SCHEMA_NAME = "provisioning"


class ControlDBPool:
    """Control database connection pool manager."""

    EXPECTED_TABLES = {
        "project_statuses",
        "client_projects",
        "project_schedulers",
    }

    def __init__(self, connection_string: str, min_size: int = 1, max_size: int = 5):
        """
        Initialize control DB pool.

        Args:
            connection_string: PostgreSQL connection string for the control database
        """
        self.connection_string = connection_string
        self.min_size = min_size
        self.max_size = max_size
        self.pool: Optional[asyncpg.Pool] = None
        self._pool_initialized = False

    async def initialize(self) -> None:
        """Create the pool, validate it, and create the schema if needed."""
        if self._pool_initialized and self.pool is not None:
            logger.debug("Control DB pool already initialized")
            return

        try:
            logger.info("Initializing control database pool")
            self.pool = await asyncpg.create_pool(
                self.connection_string,
                min_size=self.min_size,
                max_size=self.max_size,
                command_timeout=60,
                timeout=15,
            )

            async with self.pool.acquire() as conn:
                result = await conn.fetchval("SELECT 1")
                if result != 1:
                    raise RuntimeError("Pool validation query failed")

            await self._run_migrations()

            self._pool_initialized = True
            logger.success("Control database initialized successfully")

        except Exception as e:
            logger.opt(exception=e).error(f"Failed to initialize control DB pool: {e}")
            if self.pool:
                await self.pool.close()
                self.pool = None
            raise

    async def _existing_tables(self, conn) -> set:
        rows = await conn.fetch(
            """
            SELECT table_name
            FROM information_schema.tables
            WHERE table_schema = $1
            """,
            SCHEMA_NAME,
        )
        return {row["table_name"] for row in rows}

    async def _run_migrations(self) -> None:
        """Execute schema.sql unless every expected table already exists."""
        async with self.pool.acquire() as conn:
            existing_tables = await self._existing_tables(conn)
            if self.EXPECTED_TABLES <= existing_tables:
                logger.info(f"Provisioning schema and all {len(self.EXPECTED_TABLES)} expected tables exist")
                return

            schema_path = Path(__file__).parent / "schema.sql"
            if not schema_path.exists():
                raise FileNotFoundError(f"schema.sql not found at {schema_path}")

            logger.info("Provisioning schema incomplete - running schema.sql")
            await conn.execute(schema_path.read_text())

            missing_tables = self.EXPECTED_TABLES - await self._existing_tables(conn)
            if missing_tables:
                raise RuntimeError(f"Migration incomplete: missing tables {missing_tables}")
            logger.success(f"All {len(self.EXPECTED_TABLES)} provisioning tables verified")

    async def close(self) -> None:
        """Close the connection pool gracefully."""
        if self.pool:
            logger.info("Closing control database pool")
            await self.pool.close()
            self.pool = None
            self._pool_initialized = False

    def acquire(self):
        """
        Acquire a database connection from the pool.

        Usage:
            async with pool.acquire() as conn:
                result = await conn.fetchrow("SELECT * FROM ...")
        """
        if not self.pool:
            raise RuntimeError("Control DB pool not initialized - call initialize() first")
        return self.pool.acquire()

    async def health_check(self) -> bool:
        """Return True if a trivial query succeeds."""
        try:
            if not self.pool:
                return False
            async with self.pool.acquire() as conn:
                return await conn.fetchval("SELECT 1") == 1
        except Exception as e:
            logger.error(f"Control DB health check failed: {e}")
            return False
