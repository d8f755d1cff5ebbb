"""Pytest configuration and fixtures for neo-enumerations tests."""

import pytest

from neo_enumerations.config import EnumerationSettings, MissPolicy
from neo_enumerations.features.enumerations.entities import EnumerationType
from neo_enumerations.features.enumerations.repositories import InMemoryEnumerationRepository
from neo_enumerations.features.enumerations.services import EnumerationService


@pytest.fixture
def settings():
    """Settings isolated from the environment."""
    return EnumerationSettings(
        _env_file=None,
        perform_caching=True,
        default_miss_policy=MissPolicy.RAISE,
        prefer_incremental_updates=True,
    )


@pytest.fixture
def color_type():
    """Color enumeration with a safe alias on its name."""
    return EnumerationType(name="Color", safe_alias_attributes="name", indexed_attributes="html")


@pytest.fixture
def controller_action_type():
    """Composite enumeration keyed by (controller, action)."""
    return EnumerationType(name="ControllerAction", enumerator_attributes=("controller", "action"))


@pytest.fixture
def store():
    """Empty in-memory backing store."""
    return InMemoryEnumerationRepository()


@pytest.fixture
def color_store(store, color_type):
    """Store seeded with red and blue."""
    store.seed(color_type, [
        {"id": 1, "name": "red", "html": "#f00"},
        {"id": 2, "name": "blue", "html": "#00f"},
    ])
    return store


@pytest.fixture
def color_service(color_type, color_store, settings):
    """Color service over the seeded store."""
    return EnumerationService(color_type, color_store, settings)


@pytest.fixture
def controller_action_service(controller_action_type, store, settings):
    """Composite-key service with users/index and users/new."""
    store.seed(controller_action_type, [
        {"id": 1, "controller": "users", "action": "index"},
        {"id": 2, "controller": "users", "action": "new"},
        {"id": 3, "controller": "posts", "action": "index"},
    ])
    return EnumerationService(controller_action_type, store, settings)
