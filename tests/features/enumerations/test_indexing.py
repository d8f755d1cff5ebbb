"""Tests for index construction and single-record patches."""

import pytest

from neo_enumerations.core.exceptions import IndexIntegrityViolation
from neo_enumerations.features.enumerations.entities import EnumerationType
from neo_enumerations.features.enumerations.utils import IndexBuilder


def _records(enumeration_type, rows):
    return [enumeration_type.build_record(row) for row in rows]


class TestIndexBuilder:
    """Test building indexes for single-attribute enumerations."""
    
    @pytest.fixture
    def builder(self, color_type):
        return IndexBuilder(color_type)
    
    @pytest.fixture
    def index(self, builder, color_type):
        return builder.build(_records(color_type, [
            {"id": 1, "name": "red", "html": "#f00"},
            {"id": 2, "name": "Hot-Red!", "html": "#f00"},
            {"id": 3, "name": "blue", "html": "#00f"},
        ]))
    
    def test_build(self, index):
        assert len(index) == 3
        assert [r.id for r in index.records] == [1, 2, 3]
        assert index.by_id[3].name == "blue"
        assert index.by_enumerator["red"].id == 1
        assert index.by_alias["hot_red"].id == 2
        assert [r.id for r in index.by_attribute["html"]["#f00"]] == [1, 2]
    
    def test_indexes_are_read_only(self, index):
        with pytest.raises(TypeError):
            index.by_id[4] = index.by_id[1]
    
    def test_duplicate_id(self, builder, color_type):
        with pytest.raises(IndexIntegrityViolation):
            builder.build(_records(color_type, [{"id": 1, "name": "red"}, {"id": 1, "name": "blue"}]))
    
    def test_duplicate_enumerator(self, builder, color_type):
        with pytest.raises(IndexIntegrityViolation) as exc_info:
            builder.build(_records(color_type, [{"id": 1, "name": "red"}, {"id": 2, "name": "red"}]))
        assert exc_info.value.attribute == "name"
    
    def test_duplicate_alias(self, builder, color_type):
        with pytest.raises(IndexIntegrityViolation):
            builder.build(_records(color_type, [{"id": 1, "name": "Hot Red"}, {"id": 2, "name": "hot-red"}]))
    
    def test_with_record_inserts_in_id_order(self, builder, index, color_type):
        patched = builder.with_record(index, color_type.build_record({"id": 0, "name": "black", "html": "#000"}))
        
        assert [r.id for r in patched.records] == [0, 1, 2, 3]
        assert patched.by_enumerator["black"].id == 0
        assert len(index) == 3
    
    def test_with_record_replaces_same_id(self, builder, index, color_type):
        patched = builder.with_record(index, color_type.build_record({"id": 1, "name": "crimson", "html": "#f00"}))
        
        assert "red" not in patched.by_enumerator
        assert patched.by_enumerator["crimson"].id == 1
        assert [r.name for r in patched.by_attribute["html"]["#f00"]] == ["crimson", "Hot-Red!"]
    
    def test_without_record(self, builder, index):
        patched = builder.without_record(index, index.by_id[2])
        
        assert [r.id for r in patched.records] == [1, 3]
        assert "hot_red" not in patched.by_alias
        assert "Hot-Red!" not in patched.by_enumerator
        assert [r.id for r in patched.by_attribute["html"]["#f00"]] == [1]
    
    def test_without_unknown_record_is_noop(self, builder, index, color_type):
        assert builder.without_record(index, color_type.build_record({"id": 9, "name": "x"})) is index


class TestCompositeIndex:
    """Test prefix indexing of composite enumerators."""
    
    @pytest.fixture
    def builder(self, controller_action_type):
        return IndexBuilder(controller_action_type)
    
    @pytest.fixture
    def rows(self):
        return [
            {"id": 1, "controller": "users", "action": "index"},
            {"id": 2, "controller": "users", "action": "new"},
            {"id": 3, "controller": "posts", "action": "index"},
        ]
    
    def test_prefixes_map_to_first_record(self, builder, controller_action_type, rows):
        index = builder.build(_records(controller_action_type, rows))
        
        assert index.by_enumerator[("users",)].id == 1
        assert index.by_enumerator[("users", "new")].id == 2
        assert index.by_enumerator[("posts",)].id == 3
    
    def test_duplicate_full_key(self, builder, controller_action_type, rows):
        rows.append({"id": 4, "controller": "users", "action": "new"})
        with pytest.raises(IndexIntegrityViolation):
            builder.build(_records(controller_action_type, rows))
    
    def test_removed_prefix_owner_falls_to_next_record(self, builder, controller_action_type, rows):
        index = builder.build(_records(controller_action_type, rows))
        patched = builder.without_record(index, index.by_id[1])
        
        assert patched.by_enumerator[("users",)].id == 2
        assert ("users", "index") not in patched.by_enumerator
    
    def test_lower_id_takes_prefix(self, builder, controller_action_type, rows):
        index = builder.build(_records(controller_action_type, rows[1:]))
        patched = builder.with_record(index, controller_action_type.build_record(rows[0]))
        
        assert patched.by_enumerator[("users",)].id == 1
    
    def test_patch_matches_rebuild(self, builder, controller_action_type, rows):
        records = _records(controller_action_type, rows)
        patched = builder.with_record(builder.build(records[1:]), records[0])
        rebuilt = builder.build(records)
        
        assert patched.records == rebuilt.records
        assert dict(patched.by_enumerator) == dict(rebuilt.by_enumerator)
