"""Tests for window, icon, recycle bin, achievement and settings helpers."""
from desktopstate import Events


class TestWindows:

    def test_add_window_returns_stamped_copy(self, manager):
        data = {'id': 'notepad', 'title': 'Notepad'}
        window = manager.add_window(data)

        assert window == {
            'id': 'notepad', 'title': 'Notepad',
            'zIndex': 1001, 'minimized': False, 'maximized': False,
        }
        assert 'zIndex' not in data
        assert manager.get_state('windows') == [window]
        assert manager.get_state('ui.activeWindow') == 'notepad'

    def test_z_index_strictly_increases(self, manager):
        first = manager.add_window({'id': 'a'})
        second = manager.add_window({'id': 'b'})
        third = manager.add_window({'id': 'c'})
        assert first['zIndex'] < second['zIndex'] < third['zIndex']

        manager.focus_window('a')

        focused = manager.get_window('a')
        assert focused['zIndex'] > second['zIndex']
        assert focused['zIndex'] > third['zIndex']
        assert manager.get_state('ui.activeWindow') == 'a'

    def test_z_indices_stay_unique(self, manager):
        for name in 'abc':
            manager.add_window({'id': name})
        manager.focus_window('b')
        manager.focus_window('a')
        z_values = [w['zIndex'] for w in manager.get_state('windows')]
        assert len(set(z_values)) == len(z_values)

    def test_focus_clears_minimized(self, manager):
        manager.add_window({'id': 'a'})
        manager.update_window('a', {'minimized': True})
        assert manager.get_window('a')['minimized'] is True
        manager.focus_window('a')
        assert manager.get_window('a')['minimized'] is False

    def test_remove_active_picks_last_by_insertion_order(self, manager):
        manager.add_window({'id': 'a'})
        manager.add_window({'id': 'b'})
        manager.add_window({'id': 'c'})
        manager.focus_window('a')     # a now has the highest zIndex
        manager.focus_window('c')

        manager.remove_window('c')

        assert manager.get_state('ui.activeWindow') == 'b'

    def test_remove_inactive_keeps_active(self, manager):
        manager.add_window({'id': 'a'})
        manager.add_window({'id': 'b'})
        manager.remove_window('a')
        assert manager.get_state('ui.activeWindow') == 'b'

    def test_remove_last_window_clears_active(self, manager):
        manager.add_window({'id': 'a'})
        manager.remove_window('a')
        assert manager.get_state('windows') == []
        assert manager.get_state('ui.activeWindow') is None

    def test_windows_are_not_persisted(self, manager, storage):
        manager.add_window({'id': 'a'})
        assert storage.keys() == []

    def test_get_missing_window(self, manager):
        assert manager.get_window('ghost') is None


class TestIcons:

    def test_recycle_and_restore_round_trip(self, manager, storage):
        original = manager.get_state('icons')
        terminal = next(i for i in original if i['id'] == 'terminal')

        manager.recycle_icon('terminal')

        assert all(i['id'] != 'terminal' for i in manager.get_state('icons'))
        assert manager.get_state('recycledItems') == [terminal]
        assert storage.get('recycledItems') == [terminal]

        manager.restore_icon(0)

        icons = manager.get_state('icons')
        assert icons[-1] == terminal
        assert len(icons) == len(original)
        assert manager.get_state('recycledItems') == []
        assert storage.get('desktopIcons') == icons

    def test_recycle_unknown_id_is_noop(self, manager, recorded_events):
        manager.recycle_icon('nope')
        assert recorded_events == []

    def test_recycle_appends_to_end(self, manager):
        manager.recycle_icon('music')
        manager.recycle_icon('books')
        assert [i['id'] for i in manager.get_state('recycledItems')] == ['music', 'books']

    def test_restore_is_positional(self, manager):
        manager.recycle_icon('music')
        manager.recycle_icon('books')
        manager.restore_icon(1)
        assert manager.get_state('icons')[-1]['id'] == 'books'
        assert [i['id'] for i in manager.get_state('recycledItems')] == ['music']

    def test_restore_out_of_range_is_noop(self, manager):
        before = list(manager.get_state('icons'))
        manager.restore_icon(3)
        manager.restore_icon(-1)
        assert manager.get_state('icons') == before

    def test_add_icon_and_move(self, manager, storage):
        manager.add_icon({'id': 'docs', 'label': 'Docs', 'emoji': '📁', 'type': 'folder', 'x': 0, 'y': 0})
        manager.update_icon_position('docs', 120, 40)
        docs = manager.get_state('icons')[-1]
        assert (docs['x'], docs['y']) == (120, 40)
        assert storage.get('desktopIcons')[-1]['x'] == 120

    def test_file_position_with_dotted_path(self, manager, storage):
        manager.set_file_position('/Desktop/readme.txt', 10, 20)
        assert manager.get_state('filePositions') == {'/Desktop/readme.txt': {'x': 10, 'y': 20}}
        assert storage.get('filePositions') == {'/Desktop/readme.txt': {'x': 10, 'y': 20}}


class TestRecycleBin:

    def test_recycle_file_record_shape(self, manager):
        item = manager.recycle_file('/Documents/notes.txt', 'notes.txt', extension='txt', content='hello')
        assert item['type'] == 'recycled_file'
        assert item['originalPath'] == '/Documents/notes.txt'
        assert item['fileType'] == 'file'
        assert item['content'] == 'hello'
        assert isinstance(item['deletedAt'], int)
        assert manager.get_state('recycledItems') == [item]

    def test_restore_index_addresses_mixed_items(self, manager):
        manager.recycle_file('/a.txt', 'a.txt')
        manager.recycle_icon('videos')
        manager.restore_icon(1)
        assert manager.get_state('icons')[-1]['id'] == 'videos'

    def test_empty_recycle_bin(self, manager, storage):
        manager.recycle_icon('music')
        manager.recycle_file('/a.txt', 'a.txt')
        assert manager.empty_recycle_bin() == 2
        assert manager.get_state('recycledItems') == []
        assert storage.get('recycledItems') == []


class TestAchievements:

    def test_unlock_is_idempotent(self, manager, storage, recorded_events):
        assert manager.unlock_achievement('first_boot') is True

        writes = [e for e in recorded_events if e[0] == Events.STATE_CHANGE]
        unlocks = [e for e in recorded_events if e[0] == Events.ACHIEVEMENT_UNLOCK]
        assert len(writes) == 1
        assert unlocks == [(Events.ACHIEVEMENT_UNLOCK, {'id': 'first_boot'})]
        assert storage.get('achievements') == ['first_boot']

        recorded_events.clear()
        assert manager.unlock_achievement('first_boot') is False
        assert recorded_events == []
        assert manager.get_state('achievements') == ['first_boot']

    def test_has_achievement(self, manager):
        assert not manager.has_achievement('x')
        manager.unlock_achievement('x')
        assert manager.has_achievement('x')

    def test_raw_write_bypasses_uniqueness(self, manager):
        manager.set_state('achievements', ['x', 'x'])
        assert manager.get_state('achievements') == ['x', 'x']
        assert manager.unlock_achievement('x') is False


class TestSettings:

    def test_toggle_setting(self, manager, storage):
        assert manager.toggle_setting('sound') is True
        assert manager.get_state('settings.sound') is True
        assert storage.get('soundEnabled') is True
        assert manager.toggle_setting('pet.enabled') is True
        assert storage.get('petEnabled') is True
