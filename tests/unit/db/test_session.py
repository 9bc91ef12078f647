"""Unit tests for session scope handling."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlmodel import select

from keyward.config import Settings
from keyward.db import session as session_module
from keyward.db.session import close_db, get_async_session, init_db, session_scope
from keyward.models.api_key import ApiKey


@pytest.fixture
def mock_session():
    session = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=False)
    return session


class TestSessionScope:
    async def test_commits_on_success(self, mock_session):
        async with session_scope(lambda: mock_session) as session:
            assert session is mock_session

        mock_session.commit.assert_awaited_once()
        mock_session.rollback.assert_not_awaited()

    async def test_rolls_back_and_reraises(self, mock_session):
        with pytest.raises(RuntimeError):
            async with session_scope(lambda: mock_session):
                raise RuntimeError("boom")

        mock_session.rollback.assert_awaited_once()
        mock_session.commit.assert_not_awaited()


class TestDatabaseLifecycle:
    """Test init_db, get_async_session and close_db against SQLite."""

    @pytest.fixture
    async def sqlite_settings(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        settings = Settings(database={"url": f"sqlite+aiosqlite:///{tmp_path / 'keyward.db'}"})
        monkeypatch.setattr(session_module, "get_settings", lambda: settings)
        await close_db()
        yield settings
        await close_db()

    async def test_init_session_close(self, sqlite_settings: Settings):
        await init_db()

        async with get_async_session() as session:
            session.add(ApiKey(name="ci", key_hash="h"))

        async with get_async_session() as session:
            result = await session.execute(select(ApiKey))
            assert [k.name for k in result.scalars().all()] == ["ci"]

        await close_db()
        assert session_module._engine is None
        assert session_module._async_session_factory is None

    async def test_error_rolls_back(self, sqlite_settings: Settings):
        await init_db()

        with pytest.raises(RuntimeError):
            async with get_async_session() as session:
                session.add(ApiKey(name="ci", key_hash="h"))
                await session.flush()
                raise RuntimeError("boom")

        async with get_async_session() as session:
            result = await session.execute(select(ApiKey))
            assert result.scalars().all() == []
