"""Tests for the event bus and the events the store emits."""
from desktopstate import EventBus, Events


class TestEventBus:

    def test_emit_reaches_handler(self):
        bus = EventBus()
        seen = []
        bus.on('window:open', seen.append)
        bus.emit('window:open', {'id': 'notepad'})
        assert seen == [{'id': 'notepad'}]

    def test_off_and_returned_remover(self):
        bus = EventBus()
        seen = []
        remove = bus.on('x', seen.append)
        remove()
        bus.emit('x', {})
        assert seen == []
        assert bus.listener_count('x') == 0

    def test_once(self):
        bus = EventBus()
        seen = []
        bus.once('x', seen.append)
        bus.emit('x', {'n': 1})
        bus.emit('x', {'n': 2})
        assert seen == [{'n': 1}]

    def test_once_on_other_event_keeps_permanent_handler(self):
        bus = EventBus()
        seen = []
        bus.on('a', seen.append)
        bus.once('b', seen.append)

        bus.emit('a', {'n': 1})
        bus.emit('a', {'n': 2})

        assert seen == [{'n': 1}, {'n': 2}]
        assert bus.listener_count('a') == 1
        assert bus.listener_count('b') == 1

        bus.emit('b', {'n': 3})
        bus.emit('b', {'n': 4})
        assert seen == [{'n': 1}, {'n': 2}, {'n': 3}]
        assert bus.listener_count('b') == 0

    def test_wildcards(self):
        bus = EventBus()
        scoped, everything = [], []
        bus.on('state:*', scoped.append)
        bus.on('*', everything.append)
        bus.emit('state:change', {'a': 1})
        bus.emit('window:open', {'b': 2})
        assert scoped == [{'a': 1}]
        assert everything == [{'a': 1}, {'b': 2}]

    def test_failing_handler_is_isolated(self, caplog):
        bus = EventBus()
        seen = []

        def broken(payload):
            raise RuntimeError('handler exploded')

        bus.on('x', broken)
        bus.on('x', seen.append)
        bus.emit('x', {})
        assert seen == [{}]
        assert 'handler exploded' in caplog.text


class TestStoreEvents:

    def test_state_change_payload(self, manager, recorded_events):
        manager.set_state('settings.screensaverDelay', 5000)
        assert recorded_events == [
            (Events.STATE_CHANGE, {'path': 'settings.screensaverDelay', 'value': 5000, 'oldValue': 300000}),
        ]

    def test_one_event_per_write_even_without_subscribers(self, manager, recorded_events):
        manager.set_state('ui.startMenuOpen', True)
        manager.set_state('ui.startMenuOpen', True)
        assert len(recorded_events) == 2

    def test_old_value_none_for_new_path(self, manager, recorded_events):
        manager.set_state('ui.tooltip', 'hi')
        assert recorded_events[0][1]['oldValue'] is None
