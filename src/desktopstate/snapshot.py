"""
SnapshotService: whole-system export and import.

A complete snapshot bundles the persisted state slices with durable data
owned by other subsystems (file system blob, display settings, per-app save
data). Import is all-or-nothing: every subsection is first staged against a
candidate copy of the tree and a buffer of pending storage writes, and only
when the whole document has been staged is anything applied to the live
store. A malformed subsection therefore leaves the live tree and storage
untouched.

Untagged documents carrying top-level 'icons' or 'settings' are older
backups; adapt_legacy_snapshot() rewrites them into the modern shape and
they go through the same staged path.
"""
import copy
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Tuple, Union

from desktopstate.events import Events
from desktopstate.exceptions import SnapshotFormatError
from desktopstate.path_store import PathStore
from desktopstate.persistence import PersistenceBridge
from desktopstate.snapshot_model import (
    ADMIN_PASSWORD_KEY,
    BACKGROUND_KEY,
    CALENDAR_RAW_KEY,
    CLIPPY_KEY,
    CLOCK_RAW_KEY,
    DISPLAY_KEYS,
    FILE_SYSTEM_KEY,
    INVALID_FORMAT_ERROR,
    LEGACY_WARNING,
    NOTEPAD_KEY,
    PLAYLIST_KEY,
    SKIFREE_KEY,
    SNAKE_KEY,
    SNAPSHOT_TYPE,
    ZORK_RAW_KEY,
    ImportResult,
    SnapshotMeta,
)

if TYPE_CHECKING:
    from desktopstate.state_manager import StateManager

logger = logging.getLogger(__name__)

_STATE_SLICES = ('icons', 'filePositions', 'menuItems', 'recycledItems', 'achievements')
# Every top-level branch an import can write
_IMPORTED_BRANCHES = _STATE_SLICES + ('settings', 'user')


def is_complete_snapshot(data: Any) -> bool:
    if not isinstance(data, Mapping):
        return False
    meta = data.get('_meta')
    return isinstance(meta, Mapping) and meta.get('type') == SNAPSHOT_TYPE


def is_legacy_snapshot(data: Any) -> bool:
    """Untagged backups are recognised by a top-level icons or settings key."""
    return isinstance(data, Mapping) and ('icons' in data or 'settings' in data)


def adapt_legacy_snapshot(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Rewrite a legacy backup into the complete-snapshot shape.

    Legacy fields: icons, menuItems, achievements, settings, bgColor, password.
    Null collections, a settings value that isn't an object, and an empty
    background or password are dropped.
    """
    state = {
        key: data[key]
        for key in ('icons', 'menuItems', 'achievements')
        if data.get(key) is not None
    }
    if isinstance(data.get('settings'), Mapping):
        state['settings'] = data['settings']
    adapted: Dict[str, Any] = {
        '_meta': {'version': 'legacy', 'type': SNAPSHOT_TYPE, 'timestamp': '', 'exportedFrom': ''},
        'state': state,
    }
    if data.get('bgColor'):
        adapted['displaySettings'] = {BACKGROUND_KEY: data['bgColor']}
    if data.get('password'):
        adapted['security'] = {ADMIN_PASSWORD_KEY: data['password']}
    return adapted


def _section(data: Mapping[str, Any], name: str) -> Optional[Mapping[str, Any]]:
    """Fetch an optional subsection, insisting on a mapping when present."""
    value = data.get(name)
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise SnapshotFormatError(f"Snapshot section '{name}' must be an object, got {type(value).__name__}")
    return value


class _StagedImport:
    """Candidate tree plus pending storage writes for one import."""

    def __init__(self, live_store: PathStore):
        # Branches an import never writes (windows, ui) are shared, not copied
        tree = dict(live_store.tree)
        for key in _IMPORTED_BRANCHES:
            if key in tree:
                tree[key] = copy.deepcopy(tree[key])
        self.candidate = PathStore(tree)
        self.tree_writes: List[Tuple[str, Any]] = []
        self.storage_writes: List[Tuple[str, Any, bool]] = []

    def set_state(self, path: str, value: Any) -> None:
        if PersistenceBridge.is_persisted(path):
            self._check_serializable(path, value)
        self.candidate.assign(path, value)
        self.tree_writes.append((path, value))

    def set_storage(self, key: str, value: Any, raw: bool = False) -> None:
        self._check_serializable(key, value)
        self.storage_writes.append((key, value, raw))

    @staticmethod
    def _check_serializable(name: str, value: Any) -> None:
        try:
            json.dumps(value)
        except (TypeError, ValueError) as e:
            raise SnapshotFormatError(f"Value for '{name}' is not JSON-serializable: {e}") from e


class SnapshotService:
    """Builds and consumes versioned snapshots for one StateManager."""

    def __init__(self, manager: 'StateManager'):
        self._manager = manager

    @property
    def _storage(self):
        return self._manager.storage

    # ========== EXPORT ==========

    def export_complete_state(self) -> Dict[str, Any]:
        """Assemble a JSON-serializable snapshot of the whole system.

        user.isAdmin is session-only and never exported.
        """
        config = self._manager.config
        get_state = self._manager.get_state
        storage = self._storage
        meta = SnapshotMeta.create(config.snapshot_version, config.exported_from)

        state = {key: copy.deepcopy(get_state(key)) for key in _STATE_SLICES}
        state['settings'] = copy.deepcopy(get_state('settings'))
        state['user'] = {'hasVisited': get_state('user.hasVisited', False)}

        snapshot = {
            '_meta': meta.to_dict(),
            'state': state,
            'fileSystem': storage.get(FILE_SYSTEM_KEY),
            'displaySettings': {key: storage.get(key) for key in DISPLAY_KEYS},
            'appData': {
                'calendar': storage.get_raw(CALENDAR_RAW_KEY),
                'clock': storage.get_raw(CLOCK_RAW_KEY),
                'mediaPlayer': {'playlist': storage.get(PLAYLIST_KEY)},
                'games': {
                    'skifree': storage.get(SKIFREE_KEY),
                    'snake': storage.get(SNAKE_KEY),
                    'zork': storage.get_raw(ZORK_RAW_KEY),
                },
                'notepad': storage.get(NOTEPAD_KEY),
            },
            'features': {'clippyDismissed': storage.get(CLIPPY_KEY)},
            'security': {'adminPassword': storage.get(ADMIN_PASSWORD_KEY)},
        }
        logger.debug(f"Exported complete snapshot v{meta.version} at {meta.timestamp}")
        return snapshot

    def export_state(self) -> Dict[str, Any]:
        """Legacy backup format (icons, menu, achievements, settings, background, password)."""
        get_state = self._manager.get_state
        return {
            'icons': copy.deepcopy(get_state('icons')),
            'menuItems': copy.deepcopy(get_state('menuItems')),
            'achievements': copy.deepcopy(get_state('achievements')),
            'settings': copy.deepcopy(get_state('settings')),
            'bgColor': self._storage.get(BACKGROUND_KEY),
            'password': self._storage.get(ADMIN_PASSWORD_KEY),
        }

    # ========== IMPORT ==========

    def import_complete_state(self, data: Any) -> ImportResult:
        """Apply a complete snapshot, or route a legacy backup to import_state().

        Never raises; failures are reported through ImportResult.error and
        leave the live store untouched.
        """
        if not is_complete_snapshot(data):
            if is_legacy_snapshot(data):
                return self.import_state(data)
            logger.warning("Rejected snapshot import: missing complete-snapshot tag")
            return ImportResult(success=False, error=INVALID_FORMAT_ERROR)

        result = self._apply(data)
        if result.success:
            result.meta = dict(data['_meta'])
        return result

    def import_state(self, data: Mapping[str, Any]) -> ImportResult:
        """Apply a legacy backup."""
        if not isinstance(data, Mapping):
            return ImportResult(success=False, error=INVALID_FORMAT_ERROR, legacy=True)
        result = self._apply(adapt_legacy_snapshot(data))
        result.legacy = True
        if result.success:
            result.warnings.append(LEGACY_WARNING)
        return result

    def _apply(self, data: Mapping[str, Any]) -> ImportResult:
        warnings: List[str] = []
        try:
            staged = _StagedImport(self._manager.path_store)
            self._stage_state(staged, data)
            self._stage_file_system(staged, data)
            self._stage_display_settings(staged, data)
            self._stage_app_data(staged, data)
            self._stage_features(staged, data)
            self._stage_security(staged, data)
        except Exception as e:
            logger.warning(f"Snapshot import aborted before any change was applied: {e}")
            return ImportResult(success=False, error=str(e), warnings=warnings)

        try:
            self._commit(staged)
        except Exception as e:
            logger.error(f"Snapshot import failed while applying staged changes: {e}")
            warnings.append('Snapshot was partially applied')
            return ImportResult(success=False, error=str(e), warnings=warnings)

        logger.info(
            f"Imported snapshot: {len(staged.tree_writes)} state paths, "
            f"{len(staged.storage_writes)} storage keys"
        )
        self._manager.event_bus.emit(Events.STATE_IMPORT, {
            'paths': [path for path, _ in staged.tree_writes],
        })
        return ImportResult(success=True, warnings=warnings)

    def _commit(self, staged: _StagedImport) -> None:
        for path, value in staged.tree_writes:
            self._manager.set_state(path, value, persist=True)
        for key, value, raw in staged.storage_writes:
            if raw:
                self._storage.set_raw(key, value)
            else:
                self._storage.set(key, value)

    # ---- subsection staging ----

    @staticmethod
    def _stage_state(staged: _StagedImport, data: Mapping[str, Any]) -> None:
        state = _section(data, 'state')
        if state is None:
            return
        for key in _STATE_SLICES:
            if state.get(key) is not None:
                staged.set_state(key, state[key])

        settings = _section(state, 'settings')
        if settings is not None:
            for key, value in settings.items():
                if isinstance(value, Mapping):
                    for sub_key, sub_value in value.items():
                        staged.set_state(f'settings.{key}.{sub_key}', sub_value)
                else:
                    staged.set_state(f'settings.{key}', value)

        user = _section(state, 'user')
        if user is not None and user.get('hasVisited') is not None:
            staged.set_state('user.hasVisited', user['hasVisited'])

    @staticmethod
    def _stage_file_system(staged: _StagedImport, data: Mapping[str, Any]) -> None:
        if data.get('fileSystem') is not None:
            staged.set_storage(FILE_SYSTEM_KEY, data['fileSystem'])

    @staticmethod
    def _stage_display_settings(staged: _StagedImport, data: Mapping[str, Any]) -> None:
        display = _section(data, 'displaySettings')
        if display is None:
            return
        for key in DISPLAY_KEYS:
            if display.get(key) is not None:
                staged.set_storage(key, display[key])

    @staticmethod
    def _stage_app_data(staged: _StagedImport, data: Mapping[str, Any]) -> None:
        app_data = _section(data, 'appData')
        if app_data is None:
            return
        # Present-but-null raw entries clear the app's saved data
        if 'calendar' in app_data:
            staged.set_storage(CALENDAR_RAW_KEY, app_data['calendar'], raw=True)
        if 'clock' in app_data:
            staged.set_storage(CLOCK_RAW_KEY, app_data['clock'], raw=True)

        media_player = _section(app_data, 'mediaPlayer')
        if media_player is not None and media_player.get('playlist'):
            staged.set_storage(PLAYLIST_KEY, media_player['playlist'])

        games = _section(app_data, 'games')
        if games is not None:
            if 'skifree' in games:
                staged.set_storage(SKIFREE_KEY, games['skifree'])
            if 'snake' in games:
                staged.set_storage(SNAKE_KEY, games['snake'])
            if 'zork' in games:
                staged.set_storage(ZORK_RAW_KEY, games['zork'], raw=True)

        if 'notepad' in app_data:
            staged.set_storage(NOTEPAD_KEY, app_data['notepad'])

    @staticmethod
    def _stage_features(staged: _StagedImport, data: Mapping[str, Any]) -> None:
        features = _section(data, 'features')
        if features is not None and 'clippyDismissed' in features:
            staged.set_storage(CLIPPY_KEY, features['clippyDismissed'])

    @staticmethod
    def _stage_security(staged: _StagedImport, data: Mapping[str, Any]) -> None:
        security = _section(data, 'security')
        if security is not None and security.get(ADMIN_PASSWORD_KEY):
            staged.set_storage(ADMIN_PASSWORD_KEY, security[ADMIN_PASSWORD_KEY])

    # ========== FILES ==========

    def save_snapshot_to_file(self, filepath: Union[str, Path]) -> Dict[str, Any]:
        """Export a complete snapshot to a JSON file and return it."""
        snapshot = self.export_complete_state()
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(snapshot, f, indent=2, ensure_ascii=False)
        logger.info(f"Saved snapshot to {filepath}")
        return snapshot

    def load_snapshot_from_file(self, filepath: Union[str, Path]) -> ImportResult:
        """Import a snapshot (complete or legacy) from a JSON file."""
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read snapshot file {filepath}: {e}")
            return ImportResult(success=False, error=str(e))
        result = self.import_complete_state(data)
        logger.info(f"Loaded snapshot from {filepath}: success={result.success}")
        return result
