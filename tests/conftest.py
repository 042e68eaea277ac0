"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from app.adapters.persistence.database import Base
from app.adapters.persistence import models  # noqa: F401  registers the tables


def build_sqlite_engine(path, **kwargs) -> AsyncEngine:
    """File-backed SQLite engine with real BEGIN/SAVEPOINT semantics.

    WAL keeps the concurrent read session from blocking the writer's commit.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{path}", **kwargs)

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


async def create_schema(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    engine = build_sqlite_engine(tmp_path / "ledger.db")
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def ledger_lines():
    return [
        "2023-01-15,Cash,Opening,100,0",
        "2023-02-01,Rent Expense,Feb rent,40,0",
        "2023-02-01,Cash,Feb rent,0,40",
    ]


@pytest.fixture
def api_engine(tmp_path):
    """Engine for TestClient tests: NullPool, since the app runs on its own loop."""
    engine = build_sqlite_engine(tmp_path / "api.db", poolclass=NullPool)
    asyncio.run(create_schema(engine))
    return engine
