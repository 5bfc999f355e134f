"""Tests for favorites.

Tests verify:
- Toggle flips membership and returns the new state
- Toggling twice restores the original state
- Add uses INSERT ... ON CONFLICT DO NOTHING (idempotent)
- Write failures roll back and leave the state unchanged
"""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy import Delete, Insert, Select
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError

from yafoy.core.exceptions import StorageUnavailableError
from yafoy.services.favorite_service import FavoriteService


class FakeFavoriteStore:
    """Session stand-in holding the favorite state of a single (user, product) pair."""

    def __init__(self, favorite: bool = False):
        self.favorite = favorite
        self.statements = []
        self.commit = AsyncMock()
        self.rollback = AsyncMock()

    async def execute(self, stmt):
        self.statements.append(stmt)
        result = MagicMock()
        if isinstance(stmt, Select):
            result.scalar_one_or_none.return_value = uuid4() if self.favorite else None
        elif isinstance(stmt, Insert):
            self.favorite = True
        elif isinstance(stmt, Delete):
            self.favorite = False
        return result


class TestToggle:
    """Test favorite membership toggling."""

    @pytest.mark.asyncio
    async def test_toggle_adds_when_absent(self):
        store = FakeFavoriteStore(favorite=False)
        service = FavoriteService(store)

        assert await service.toggle(uuid4(), uuid4()) is True
        assert store.favorite is True
        store.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_toggle_removes_when_present(self):
        store = FakeFavoriteStore(favorite=True)
        service = FavoriteService(store)

        assert await service.toggle(uuid4(), uuid4()) is False
        assert store.favorite is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("initial", [True, False])
    async def test_toggle_twice_restores_state(self, initial):
        store = FakeFavoriteStore(favorite=initial)
        service = FavoriteService(store)
        user_id, product_id = uuid4(), uuid4()

        await service.toggle(user_id, product_id)
        await service.toggle(user_id, product_id)

        assert store.favorite is initial
        assert await service.is_favorite(user_id, product_id) is initial

    @pytest.mark.asyncio
    async def test_add_ignores_duplicates(self):
        store = FakeFavoriteStore()
        service = FavoriteService(store)

        await service.add(uuid4(), uuid4())

        sql = str(store.statements[0].compile(dialect=postgresql.dialect()))
        assert "ON CONFLICT ON CONSTRAINT uq_favorite_user_product DO NOTHING" in sql


class TestWriteFailure:
    @pytest.mark.asyncio
    async def test_failure_rolls_back(self, mock_db):
        mock_db.execute = AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("down")))
        service = FavoriteService(mock_db)

        with pytest.raises(StorageUnavailableError) as exc_info:
            await service.add(uuid4(), uuid4())

        assert exc_info.value.code == "FAVORITE_UPDATE_FAILED"
        mock_db.rollback.assert_awaited_once()
        mock_db.commit.assert_not_awaited()
