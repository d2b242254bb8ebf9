"""Tests for the control database pool bootstrap."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock
from unittest.mock import MagicMock
from unittest.mock import patch

import pytest

from tenantdb_api.workflow.db.pool import ControlDBPool


def _tables(*names):
    return [{"table_name": name} for name in names]


@pytest.fixture
def conn():
    conn = MagicMock()
    conn.fetchval = AsyncMock(return_value=1)
    conn.fetch = AsyncMock(return_value=_tables(*ControlDBPool.EXPECTED_TABLES))
    conn.execute = AsyncMock(return_value="CREATE SCHEMA")
    return conn


@pytest.fixture
def asyncpg_pool(conn):
    pool = MagicMock()
    pool.close = AsyncMock()

    @asynccontextmanager
    async def acquire():
        yield conn

    pool.acquire = acquire
    return pool


class TestControlDBPool:
    @pytest.mark.asyncio
    async def test_initialize_skips_schema_when_tables_exist(self, asyncpg_pool, conn):
        with patch("tenantdb_api.workflow.db.pool.asyncpg.create_pool", new=AsyncMock(return_value=asyncpg_pool)):
            pool = ControlDBPool("postgresql://localhost/control")
            await pool.initialize()

        conn.execute.assert_not_awaited()
        assert await pool.health_check() is True

    @pytest.mark.asyncio
    async def test_initialize_runs_schema_when_missing(self, asyncpg_pool, conn):
        conn.fetch.side_effect = [_tables(), _tables(*ControlDBPool.EXPECTED_TABLES)]

        with patch("tenantdb_api.workflow.db.pool.asyncpg.create_pool", new=AsyncMock(return_value=asyncpg_pool)):
            await ControlDBPool("postgresql://localhost/control").initialize()

        schema_sql = conn.execute.call_args.args[0]
        assert "CREATE SCHEMA IF NOT EXISTS provisioning" in schema_sql
        assert "(3, 'Failed')" in schema_sql

    @pytest.mark.asyncio
    async def test_incomplete_migration_closes_pool(self, asyncpg_pool, conn):
        conn.fetch.side_effect = [_tables(), _tables("project_statuses")]

        with patch("tenantdb_api.workflow.db.pool.asyncpg.create_pool", new=AsyncMock(return_value=asyncpg_pool)):
            pool = ControlDBPool("postgresql://localhost/control")
            with pytest.raises(RuntimeError, match="Migration incomplete"):
                await pool.initialize()

        asyncpg_pool.close.assert_awaited_once()
        assert pool.pool is None

    @pytest.mark.asyncio
    async def test_health_check_without_pool(self):
        assert await ControlDBPool("postgresql://localhost/control").health_check() is False

    def test_acquire_before_initialize_raises(self):
        with pytest.raises(RuntimeError, match="not initialized"):
            ControlDBPool("postgresql://localhost/control").acquire()

    @pytest.mark.asyncio
    async def test_close(self, asyncpg_pool):
        with patch("tenantdb_api.workflow.db.pool.asyncpg.create_pool", new=AsyncMock(return_value=asyncpg_pool)):
            pool = ControlDBPool("postgresql://localhost/control")
            await pool.initialize()
            await pool.close()

        asyncpg_pool.close.assert_awaited_once()
        assert pool.pool is None
