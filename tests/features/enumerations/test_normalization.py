"""Tests for lookup key normalization."""

from enum import Enum

import pytest

from neo_enumerations.core.exceptions import InvalidKeyType
from neo_enumerations.features.enumerations.utils import KeyNormalizer


class Shade(Enum):
    RED = 1
    BLUE = 2


class Tone(str, Enum):
    WARM = "warm"
    COOL = "cool"


class TestKeyNormalizer:
    """Test key classification and canonicalization."""
    
    def test_int_is_id(self):
        assert KeyNormalizer.is_id(1)
        assert KeyNormalizer.is_id(0)
        assert not KeyNormalizer.is_id("1")
    
    def test_bool_is_not_id(self):
        assert not KeyNormalizer.is_id(True)
        with pytest.raises(InvalidKeyType):
            KeyNormalizer.normalize(False)
    
    def test_strings_pass_through(self):
        assert KeyNormalizer.normalize("red") == "red"
        assert KeyNormalizer.normalize("Hot-Red!") == "Hot-Red!"
    
    def test_enum_member_uses_name_for_non_string_values(self):
        assert KeyNormalizer.normalize(Shade.RED) == "RED"
    
    def test_enum_member_uses_string_value(self):
        assert KeyNormalizer.normalize(Tone.WARM) == "warm"
    
    @pytest.mark.parametrize("key", [3.5, b"red", object(), {"name": "red"}])
    def test_unsupported_types_raise(self, key):
        with pytest.raises(InvalidKeyType) as exc_info:
            KeyNormalizer.normalize(key, "Color")
        
        assert exc_info.value.type_name == "Color"
        assert exc_info.value.key_type == type(key).__name__
        assert "Color" in str(exc_info.value)
    
    def test_invalid_key_type_is_a_type_error(self):
        with pytest.raises(TypeError):
            KeyNormalizer.normalize(3.5)
    
    def test_composite_keys(self):
        assert KeyNormalizer.is_composite(("users", "index"))
        assert KeyNormalizer.is_composite(["users", "index"])
        assert not KeyNormalizer.is_composite("users")
        assert KeyNormalizer.normalize_composite(["users", Tone.COOL]) == ("users", "cool")
    
    def test_composite_with_invalid_component_raises(self):
        with pytest.raises(InvalidKeyType):
            KeyNormalizer.normalize_composite(("users", 3.5))
    
    def test_normalize_composite_rejects_scalars(self):
        with pytest.raises(InvalidKeyType):
            KeyNormalizer.normalize_composite("users")
    
    def test_index_value(self):
        assert KeyNormalizer.index_value(Tone.WARM) == "warm"
        assert KeyNormalizer.index_value("#f00") == "#f00"
        assert KeyNormalizer.index_value(None) is None
    
    @pytest.mark.parametrize("value,alias", [
        ("Hot-Red!", "hot_red"),
        ("hot red", "hot_red"),
        ("HOT__RED", "hot_red"),
        ("red", "red"),
        ("!!!", None),
        (7, None),
    ])
    def test_safe_alias(self, value, alias):
        assert KeyNormalizer.safe_alias(value) == alias
