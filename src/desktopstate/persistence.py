"""
PersistenceBridge: selective mirroring of state paths to durable storage.

Only paths listed in PERSISTENCE_KEYS ever reach storage. Everything else,
including user.isAdmin and the whole ui slice, lives for the session only.
"""
import logging
from typing import Any, Dict

from desktopstate.defaults import default_icons
from desktopstate.path_store import PathStore
from desktopstate.storage import DurableStorage

logger = logging.getLogger(__name__)

# state path -> durable key
PERSISTENCE_KEYS: Dict[str, str] = {
    'icons': 'desktopIcons',
    'filePositions': 'filePositions',
    'menuItems': 'menuItems',
    'recycledItems': 'recycledItems',
    'achievements': 'achievements',
    'settings.sound': 'soundEnabled',
    'settings.crtEffect': 'crtEnabled',
    'settings.pet.enabled': 'petEnabled',
    'settings.pet.type': 'currentPet',
    'user.hasVisited': 'hasVisited',
}

_BOOLEAN_PATHS = ('settings.sound', 'settings.crtEffect', 'settings.pet.enabled')
_OBJECT_PATHS = ('filePositions', 'menuItems', 'recycledItems', 'achievements')


def _as_bool(value: Any) -> bool:
    # Older builds stored booleans as strings
    return value is True or value == 'true'


class PersistenceBridge:
    """Maps state paths to durable keys and hydrates the tree at boot."""

    def __init__(self, storage: DurableStorage):
        self.storage = storage

    @staticmethod
    def is_persisted(path: str) -> bool:
        return path in PERSISTENCE_KEYS

    def persist(self, path: str, value: Any) -> bool:
        """Mirror a write to storage.

        Returns:
            True if the value was written. False for unmapped paths (silent)
            and for storage failures (already logged by the backend).
        """
        key = PERSISTENCE_KEYS.get(path)
        if key is None:
            return False
        return self.storage.set(key, value)

    def hydrate(self, path_store: PathStore) -> None:
        """Overlay saved values onto a freshly constructed tree.

        Reads every mapped key exactly once. Icons fall back to the built-in
        defaults when never saved.
        """
        saved = {path: self.storage.get(key) for path, key in PERSISTENCE_KEYS.items()}

        icons = saved['icons']
        path_store.assign('icons', icons if icons is not None else default_icons())

        for path in _OBJECT_PATHS:
            if saved[path]:
                path_store.assign(path, saved[path])

        for path in _BOOLEAN_PATHS:
            if saved[path] is not None:
                path_store.assign(path, _as_bool(saved[path]))

        if saved['settings.pet.type']:
            path_store.assign('settings.pet.type', saved['settings.pet.type'])
        if saved['user.hasVisited']:
            path_store.assign('user.hasVisited', True)

        logger.debug(f"Hydrated state with {len(path_store.get_state('icons', []))} icons")
