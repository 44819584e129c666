"""Tests for the StateManager handle: lifecycle, isolation, config and proxy access."""
import pytest

from desktopstate import (
    DEFAULT_ICONS,
    Events,
    StateManager,
    StoreConfig,
    get_store_config,
    reset_store_config,
    set_store_config,
)


class TestLifecycle:

    def test_construction_uses_defaults_before_initialize(self, storage, config):
        manager = StateManager(storage=storage, config=config)
        assert manager.initialized is False
        assert manager.get_state('icons') == []
        assert manager.get_state('settings.screensaverDelay') == 300000
        assert manager.z_index == 1000

    def test_round_trip(self, manager):
        manager.set_state('menuItems', [{'label': 'Games'}])
        assert manager.get_state('menuItems') == [{'label': 'Games'}]

    def test_round_trip_through_empty_list(self, manager, recorded_events):
        seen = []
        manager.subscribe('windows', lambda v, p: seen.append(p))

        manager.set_state('windows.0.title', 'Notepad')

        assert manager.get_state('windows.0.title') == 'Notepad'
        assert recorded_events == [
            ('state:change', {'path': 'windows.0.title', 'value': 'Notepad', 'oldValue': None})
        ]
        assert seen == ['windows.0.title']

    def test_reset_clears_storage_and_rebuilds(self, manager, storage, event_bus):
        resets = []
        event_bus.on(Events.STATE_RESET, resets.append)
        manager.unlock_achievement('a')
        manager.set_state('settings.sound', True, True)
        manager.add_window({'id': 'w'})
        storage.set_raw('zork_save', 'kept')
        seen = []
        manager.subscribe('settings.sound', lambda v, p: seen.append(v))
        restarted = []

        manager.reset(on_restart=restarted.append)

        assert storage.keys() == []
        assert storage.get_raw('zork_save') == 'kept'
        assert manager.get_state('achievements') == []
        assert manager.get_state('windows') == []
        assert manager.get_state('icons') == DEFAULT_ICONS
        assert manager.z_index == 1000
        assert restarted == [manager]
        assert resets == [{}]

        manager.set_state('settings.sound', True)
        assert seen == [True]

    def test_instances_are_isolated(self, config):
        first = StateManager(config=config)
        second = StateManager(config=config)
        first.initialize()
        second.initialize()

        first.add_window({'id': 'only-here'})
        first.set_state('settings.sound', True, True)

        assert second.get_state('windows') == []
        assert second.get_state('settings.sound') is False
        assert second.storage.get('soundEnabled') is None


class TestConfig:

    def test_installed_config_is_used(self):
        set_store_config(StoreConfig(initial_z_index=50, storage_prefix='cfg_'))
        manager = StateManager()
        assert manager.add_window({'id': 'a'})['zIndex'] == 51
        assert manager.storage.prefix == 'cfg_'

    def test_default_config(self):
        reset_store_config()
        assert get_store_config().max_cascade_depth == 32

    def test_from_dict_ignores_unknown_keys(self):
        config = StoreConfig.from_dict({'initial_z_index': 7, 'colour': 'teal'})
        assert config.initial_z_index == 7
        assert config.to_dict()['snapshot_version'] == '2.0'


class TestFieldAccess:

    def test_attribute_chain(self, manager):
        assert manager.fields.settings.pet.enabled is False
        manager.set_state('settings.pet.enabled', True)
        assert manager.fields.settings.pet.enabled is True

    def test_item_access_for_dotted_keys(self, manager):
        manager.set_file_position('/a.b/c.txt', 1, 2)
        assert manager.fields.filePositions['/a.b/c.txt'].x == 1

    def test_list_access(self, manager):
        manager.add_window({'id': 'calc'})
        windows = manager.fields.windows
        assert len(windows) == 1
        assert windows[0].id == 'calc'

    def test_missing_attribute(self, manager):
        with pytest.raises(AttributeError):
            manager.fields.settings.volume

    def test_read_only(self, manager):
        with pytest.raises(AttributeError):
            manager.fields.settings = {}
