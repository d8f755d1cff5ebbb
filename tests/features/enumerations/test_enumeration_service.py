"""Tests for the enumeration service write path and registry."""

import asyncio
from unittest.mock import patch

import pytest

from neo_enumerations.config import CacheState, EnumerationSettings, MissPolicy, UpdateOperation
from neo_enumerations.core.exceptions import (
    ConfigurationError,
    ModificationNotPermitted,
    RecordInvalid,
    RecordNotFound,
)
from neo_enumerations.features.enumerations.entities import EnumerationType
from neo_enumerations.features.enumerations.services import EnumerationRegistry, EnumerationService


class TestGuardedWrites:
    """Test create, update and delete through the service."""
    
    @pytest.mark.asyncio
    async def test_writes_require_permission(self, color_service):
        with pytest.raises(ModificationNotPermitted):
            await color_service.create({"name": "green"})
        with pytest.raises(ModificationNotPermitted):
            await color_service.update(1, {"html": "#e00"})
        with pytest.raises(ModificationNotPermitted):
            await color_service.delete(1)
    
    @pytest.mark.asyncio
    async def test_create(self, color_service, color_store, color_type):
        async with color_service.permit_modifications():
            record = await color_service.create({"name": "green", "html": "#0f0"})
        
        assert record.id == 3
        assert (await color_service.resolve("green")) == record
        assert len(await color_store.list(color_type)) == 3
    
    @pytest.mark.asyncio
    async def test_update(self, color_service):
        await color_service.all()
        
        async with color_service.permit_modifications():
            record = await color_service.update(1, {"name": "crimson"})
        
        assert record.html == "#f00"
        assert (await color_service.resolve("crimson")).id == 1
        assert await color_service.find("red") is None
    
    @pytest.mark.asyncio
    async def test_delete(self, color_service):
        await color_service.all()
        
        async with color_service.permit_modifications():
            assert await color_service.delete(2) is True
        
        assert await color_service.find("blue") is None
        assert await color_service.cache.count() == 1
    
    @pytest.mark.asyncio
    async def test_missing_record(self, color_service):
        async with color_service.permit_modifications():
            with pytest.raises(RecordNotFound):
                await color_service.update(99, {"name": "x"})
            with pytest.raises(RecordNotFound):
                await color_service.delete(99)
    
    @pytest.mark.asyncio
    async def test_enumerator_must_be_unique(self, color_service):
        async with color_service.permit_modifications():
            with pytest.raises(RecordInvalid) as exc_info:
                await color_service.create({"name": "red"})
            assert exc_info.value.errors == ["name has already been taken"]
            
            with pytest.raises(RecordInvalid):
                await color_service.update(2, {"name": "red"})
            
            # Re-saving a record with its own enumerator is fine
            await color_service.update(1, {"name": "red", "html": "#e00"})
    
    @pytest.mark.asyncio
    async def test_alias_must_be_unique(self, color_service, color_store, color_type):
        async with color_service.permit_modifications():
            with pytest.raises(RecordInvalid):
                await color_service.create({"name": "Red!"})
            with pytest.raises(RecordInvalid):
                await color_service.update(2, {"name": "RED"})
        
        assert [row["name"] for row in await color_store.list(color_type)] == ["red", "blue"]
        await color_service.invalidate()
        assert (await color_service.resolve("red")).id == 1
    
    @pytest.mark.asyncio
    async def test_other_tasks_stay_guarded_during_admin_block(self, color_service):
        entered = asyncio.Event()
        release = asyncio.Event()
        
        async def admin_block():
            async with color_service.permit_modifications():
                entered.set()
                await release.wait()
        
        admin = asyncio.ensure_future(admin_block())
        await entered.wait()
        
        with pytest.raises(ModificationNotPermitted):
            await color_service.create({"name": "rogue"})
        
        release.set()
        await admin
        assert await color_service.find("rogue") is None
    
    @pytest.mark.asyncio
    async def test_blank_enumerator(self, color_service):
        async with color_service.permit_modifications():
            with pytest.raises(RecordInvalid):
                await color_service.create({"name": ""})
    
    @pytest.mark.asyncio
    async def test_composite_uniqueness(self, controller_action_service):
        async with controller_action_service.permit_modifications():
            with pytest.raises(RecordInvalid):
                await controller_action_service.create({"controller": "users", "action": "new"})
            
            record = await controller_action_service.create({"controller": "users", "action": "edit"})
        
        assert (await controller_action_service.resolve(("users", "edit"))) == record
        assert (await controller_action_service.resolve("users")).id == 1
    
    @pytest.mark.asyncio
    async def test_incremental_updates_patch_loaded_cache(self, color_service):
        snapshot = await color_service.all()
        
        with patch.object(color_service.cache, "invalidate", wraps=color_service.cache.invalidate) as invalidate:
            async with color_service.permit_modifications():
                await color_service.create({"name": "green"})
        
        invalidate.assert_not_called()
        assert color_service.cache.state is CacheState.LOADED
        assert await color_service.all() is not snapshot
    
    @pytest.mark.asyncio
    async def test_invalidation_when_incremental_updates_disabled(self, color_type, color_store):
        service = EnumerationService(color_type, color_store, EnumerationSettings(prefer_incremental_updates=False))
        await service.all()
        
        async with service.permit_modifications():
            await service.create({"name": "green"})
        
        assert service.cache.state is CacheState.EMPTY
        assert (await service.resolve("green")).id == 3
    
    def test_type_overrides_incremental_setting(self, color_store, settings):
        reloading = EnumerationType(name="Color", incremental_updates=False)
        
        assert EnumerationService(reloading, color_store, settings).incremental_updates is False
    
    @pytest.mark.asyncio
    async def test_update_incremental_passthrough(self, color_service):
        await color_service.all()
        
        await color_service.update_incremental(UpdateOperation.PUSH, {"id": 7, "name": "teal"})
        
        assert (await color_service.resolve("teal")).id == 7


class TestEnumerationRegistry:
    """Test the per-process registry."""
    
    @pytest.fixture
    def registry(self, settings, color_type, color_store, controller_action_type, store):
        registry = EnumerationRegistry(settings)
        registry.register(color_type, color_store)
        registry.register(controller_action_type, store, MissPolicy.SILENT)
        return registry
    
    def test_register(self, registry, color_type):
        assert "Color" in registry
        assert registry.names == ["Color", "ControllerAction"]
        assert registry.get(color_type) is registry.get("Color")
    
    def test_duplicate_registration(self, registry, color_type, color_store):
        with pytest.raises(ConfigurationError):
            registry.register(color_type, color_store)
    
    def test_unknown_enumeration(self, registry):
        with pytest.raises(ConfigurationError):
            registry.get("Size")
    
    def test_unregister(self, registry):
        registry.unregister("Color")
        
        assert "Color" not in registry
    
    @pytest.mark.asyncio
    async def test_resolve(self, registry):
        assert (await registry.resolve("Color", "blue")).id == 2
        assert await registry.resolve("ControllerAction", ("users", "index")) is None
    
    @pytest.mark.asyncio
    async def test_invalidate_all(self, registry):
        await registry.all("Color")
        
        await registry.invalidate_all()
        
        assert all(stats["state"] == "empty" for stats in registry.stats())
    
    @pytest.mark.asyncio
    async def test_bootstrap(self, registry):
        await registry.bootstrap("ControllerAction", [{"id": 1, "controller": "home", "action": "show"}])
        
        assert (await registry.resolve("ControllerAction", "home")).id == 1
        assert len(await registry.all("ControllerAction")) == 1
