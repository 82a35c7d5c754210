import os
import uuid
from unittest.mock import AsyncMock

# Rule-based narratives and a local database so imports don't need services
os.environ.setdefault("RAPPORT_LLM_PROVIDER", "none")
os.environ.setdefault("RAPPORT_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
import pytest_asyncio
from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from rapport.database import Base
from rapport.locks import KeyedLocks
from rapport.narrative.fallback import RuleBasedNarrator

import rapport.models  # noqa: F401  register tables

# SQLite stands in for PostgreSQL; JSONB and UUID are remapped below
TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def db_engine():
    # Remap PostgreSQL-specific types to SQLite-compatible types
    # so create_all works with SQLite
    _remap_pg_types()

    engine = create_async_engine(TEST_DB_URL, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


def _remap_pg_types():
    """Remap JSONB→JSON and UUID→String(36) for SQLite compatibility."""
    from sqlalchemy.dialects.sqlite.base import SQLiteTypeCompiler

    # Only patch once
    if getattr(SQLiteTypeCompiler, "_rapport_patched", False):
        return
    SQLiteTypeCompiler._rapport_patched = True

    original_process = SQLiteTypeCompiler.process

    def patched_process(self, type_, **kw):
        if isinstance(type_, JSONB):
            return self.process(JSON(), **kw)
        if isinstance(type_, UUID):
            return "VARCHAR(36)"
        return original_process(self, type_, **kw)

    SQLiteTypeCompiler.process = patched_process


@pytest_asyncio.fixture
async def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def narrator():
    return RuleBasedNarrator()


@pytest.fixture
def locks():
    return KeyedLocks()


@pytest.fixture
def group_id():
    return uuid.UUID("7b0c6f3e-2a51-4d8e-9c1a-5e0f4b2d8a10")


@pytest.fixture
def session_id():
    return uuid.UUID("aaaaaaaa-bbbb-cccc-dddd-eeeeeeeeeeee")


@pytest.fixture
def participant_map():
    return {"Alex": "user-alex", "Sam": "user-sam"}


@pytest.fixture
def couple_messages():
    return [
        {"speakerLabel": "Alex", "textContent": "You never help with the dishes. You always leave them for me."},
        {"speakerLabel": "Sam", "textContent": "That's not true. I did them on Tuesday."},
        {"speakerLabel": "Alex", "textContent": "Whatever. I don't care anymore."},
        {"speakerLabel": "Sam", "textContent": "I'm sorry. Can we take a break and talk about this later?"},
        {"speakerLabel": "Alex", "textContent": "Fine. Thank you for saying that."},
        {"speakerLabel": "Sam", "textContent": "We're on the same team. I love you."},
    ]


@pytest.fixture
def mock_llm():
    """Create a mock LLM client for tests."""
    mock_client = AsyncMock()
    mock_client.generate = AsyncMock(
        return_value=(
            "STRENGTHS: You listen closely.\n"
            "GROWTH_AREAS: Say what you need sooner.\n"
            "COMMUNICATION: You are direct and warm."
        )
    )
    return mock_client
