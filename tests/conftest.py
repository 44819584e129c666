"""Pytest configuration and shared fixtures."""
import pytest

from desktopstate import EventBus, MemoryStorage, StateManager, StoreConfig
import desktopstate.config as config_module


@pytest.fixture(autouse=True)
def reset_store_config():
    """Restore the installed StoreConfig after each test."""
    original = config_module._store_config
    yield
    config_module._store_config = original


@pytest.fixture
def storage():
    return MemoryStorage(prefix='test_')


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def config():
    return StoreConfig(storage_prefix='test_', max_cascade_depth=8)


@pytest.fixture
def manager(storage, event_bus, config):
    """Initialized StateManager over empty storage."""
    state_manager = StateManager(storage=storage, event_bus=event_bus, config=config)
    state_manager.initialize()
    return state_manager


@pytest.fixture
def recorded_events(event_bus):
    """List of (event_name, payload) for state:change and achievement:unlock."""
    events = []
    event_bus.on('state:change', lambda p: events.append(('state:change', p)))
    event_bus.on('achievement:unlock', lambda p: events.append(('achievement:unlock', p)))
    return events
