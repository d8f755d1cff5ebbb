"""Tests for reconciling the backing store with declared records."""

from unittest.mock import patch

import pytest

from neo_enumerations.config import CacheState
from neo_enumerations.core.exceptions import ModificationNotPermitted, RecordInvalid, ValidationError


class TestBootstrapper:
    """Test bootstrap reconciliation."""
    
    @pytest.fixture
    def declared(self):
        return [
            {"id": 1, "name": "red", "html": "#f00"},
            {"id": 3, "name": "green", "html": "#0f0"},
        ]
    
    @pytest.mark.asyncio
    async def test_store_holds_exactly_declared_records(self, color_service, color_store, color_type, declared):
        records = await color_service.bootstrap(declared)
        
        assert [r.id for r in records] == [1, 3]
        assert await color_store.list(color_type) == declared
    
    @pytest.mark.asyncio
    async def test_idempotent(self, color_service, color_store, color_type, declared):
        await color_service.bootstrap(declared)
        first = await color_store.list(color_type)
        
        await color_service.bootstrap(declared)
        
        assert await color_store.list(color_type) == first
    
    @pytest.mark.asyncio
    async def test_declared_attributes_overwrite(self, color_service):
        await color_service.bootstrap([{"id": 1, "name": "crimson", "html": "#f00"}])
        
        assert (await color_service.resolve(1)).name == "crimson"
    
    @pytest.mark.asyncio
    async def test_defaults_only_fill_blank_values(self, color_service, color_store, color_type):
        color_store.seed(color_type, [{"id": 1, "name": "red", "html": ""}])
        
        await color_service.bootstrap([
            {"id": 1, "name": "red", "defaults": {"html": "#ff0000"}},
            {"id": 2, "name": "blue", "defaults": {"html": "#0000ff"}},
            {"id": 4, "name": "white", "defaults": {"html": "#fff"}},
        ])
        rows = {row["id"]: row for row in await color_store.list(color_type)}
        
        assert rows[1]["html"] == "#ff0000"
        assert rows[2]["html"] == "#00f"
        assert rows[4]["html"] == "#fff"
    
    @pytest.mark.asyncio
    async def test_invalidates_cache(self, color_service, declared):
        await color_service.all()
        
        await color_service.bootstrap(declared)
        
        assert color_service.cache.state is CacheState.EMPTY
        assert (await color_service.resolve("green")).id == 3
        assert await color_service.find("blue") is None
    
    @pytest.mark.asyncio
    async def test_permission_is_scoped_to_bootstrap(self, color_service, declared):
        await color_service.bootstrap(declared)
        
        with pytest.raises(ModificationNotPermitted):
            await color_service.create({"name": "black"})
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize("declared", [
        [{"name": "red"}],
        [{"id": "1", "name": "red"}],
        [{"id": 1, "name": "red"}, {"id": 1, "name": "blue"}],
        [{"id": 1, "name": "red"}, {"id": 2, "name": "red"}],
        [{"id": 1, "name": ""}],
        [{"id": 1, "name": "red"}, {"id": 2, "name": "Red!"}],
    ])
    async def test_invalid_declarations_write_nothing(self, color_service, color_store, color_type, declared):
        before = await color_store.list(color_type)
        
        with pytest.raises(RecordInvalid):
            await color_service.bootstrap(declared)
        
        assert await color_store.list(color_type) == before
    
    @pytest.mark.asyncio
    async def test_store_rejection_rolls_back(self, color_service, color_store, color_type, declared):
        before = await color_store.list(color_type)
        await color_service.all()
        
        with patch.object(color_store, "create", side_effect=ValidationError("name is reserved")):
            with pytest.raises(RecordInvalid) as exc_info:
                await color_service.bootstrap(declared)
        
        assert exc_info.value.errors == ["name is reserved"]
        assert await color_store.list(color_type) == before
        assert color_service.cache.state is CacheState.EMPTY
    
    @pytest.mark.asyncio
    async def test_empty_declaration_clears_store(self, color_service, color_store, color_type):
        assert await color_service.bootstrap([]) == []
        assert await color_store.list(color_type) == []
