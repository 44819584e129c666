"""
Hierarchical reactive state store for the desktop shell.

This package is the single source of truth for the window manager, desktop
icons, settings, achievements and recycle bin.

Key Features:
- Dotted-path addressing into a nested, dynamically shaped tree
- Subscriber cascade: a leaf write also notifies every observed ancestor path
- Selective persistence: only mapped paths survive a restart
- Versioned whole-system snapshots with staged, all-or-nothing import
- Domain helpers that enforce unique window z-order and move semantics

Quick Start:
    >>> from desktopstate import StateManager, MemoryStorage
    >>>
    >>> manager = StateManager(storage=MemoryStorage())
    >>> manager.initialize()
    >>>
    >>> unsubscribe = manager.subscribe('settings', lambda value, path: print(path))
    >>> manager.set_state('settings.sound', True, persist=True)
    settings.sound
    >>> manager.storage.get('soundEnabled')
    True

Architecture:
    PathStore            nested tree, get/assign by path
    SubscriptionRegistry exact-then-ancestor observer cascade
    PersistenceBridge    path -> durable key table, boot hydration
    SnapshotService      export/import of the complete system
    DomainHelpersMixin   windows, icons, recycle bin, achievements
    StateManager         wires the above into one handle

Modules:
    - state_manager: StateManager handle
    - path_store: tree and path primitives
    - subscriptions: observer registry and cascade
    - persistence: persistence key table and hydration
    - storage: durable key-value backends
    - snapshot / snapshot_model: snapshot service and its types
    - helpers: domain helper operations
    - events: in-process event bus
    - state_proxy: read-only attribute access
    - config: store configuration
"""

from desktopstate.config import (
    StoreConfig,
    get_store_config,
    reset_store_config,
    set_store_config,
)
from desktopstate.defaults import DEFAULT_ICONS, default_icons, default_tree
from desktopstate.events import EventBus, Events
from desktopstate.exceptions import (
    CascadeDepthError,
    SnapshotFormatError,
    StateStoreError,
    StorageWriteError,
)
from desktopstate.path_store import PathStore, parent_paths, split_path
from desktopstate.persistence import PERSISTENCE_KEYS, PersistenceBridge
from desktopstate.snapshot import (
    SnapshotService,
    adapt_legacy_snapshot,
    is_complete_snapshot,
    is_legacy_snapshot,
)
from desktopstate.snapshot_model import ImportResult, SnapshotMeta
from desktopstate.state_manager import StateManager
from desktopstate.state_proxy import StateProxy
from desktopstate.storage import DurableStorage, JsonFileStorage, MemoryStorage
from desktopstate.subscriptions import SubscriptionRegistry

__all__ = [
    # Handle
    'StateManager',
    # Primitives
    'PathStore',
    'split_path',
    'parent_paths',
    'SubscriptionRegistry',
    'StateProxy',
    # Persistence
    'PersistenceBridge',
    'PERSISTENCE_KEYS',
    'DurableStorage',
    'MemoryStorage',
    'JsonFileStorage',
    # Snapshots
    'SnapshotService',
    'SnapshotMeta',
    'ImportResult',
    'adapt_legacy_snapshot',
    'is_complete_snapshot',
    'is_legacy_snapshot',
    # Events
    'EventBus',
    'Events',
    # Defaults
    'DEFAULT_ICONS',
    'default_icons',
    'default_tree',
    # Configuration
    'StoreConfig',
    'get_store_config',
    'set_store_config',
    'reset_store_config',
    # Errors
    'StateStoreError',
    'CascadeDepthError',
    'SnapshotFormatError',
    'StorageWriteError',
]

__version__ = '1.0.0'
__description__ = 'Hierarchical reactive state store for the desktop shell'
