"""Async SQLAlchemy engine, session factory and declarative base."""

from collections.abc import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.config import settings


class Base(DeclarativeBase):
    pass


engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(engine, expire_on_commit=False)


async def get_session() -> AsyncIterator[AsyncSession]:
    """Request-scoped session. Routes commit explicitly; anything else rolls back on close."""
    async with async_session_factory() as session:
        yield session


async def get_read_session() -> AsyncIterator[AsyncSession]:
    """Second request-scoped session for reads that run alongside the main one.

    An AsyncSession cannot execute two statements concurrently.
    """
    async with async_session_factory() as session:
        yield session
