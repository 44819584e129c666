"""
StateManager: the single source of truth for desktop state.

One instance owns one state tree and wires together the path store, the
subscription cascade, the persistence bridge, the snapshot service and the
domain helpers. Pass the instance explicitly to whatever needs it; there is
no module-level singleton, so tests and multiple sessions stay isolated.

Write pipeline for set_state(path, value, persist):
    assign in tree -> subscriber cascade -> 'state:change' event -> optional persist
"""
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from desktopstate.config import StoreConfig, get_store_config
from desktopstate.defaults import default_tree
from desktopstate.events import EventBus, Events
from desktopstate.helpers import DomainHelpersMixin
from desktopstate.path_store import PathStore
from desktopstate.persistence import PersistenceBridge
from desktopstate.snapshot import SnapshotService
from desktopstate.snapshot_model import ImportResult
from desktopstate.state_proxy import StateProxy
from desktopstate.storage import DurableStorage, MemoryStorage
from desktopstate.subscriptions import StateCallback, SubscriptionRegistry

logger = logging.getLogger(__name__)


class StateManager(DomainHelpersMixin):
    """Reactive hierarchical state store.

    Thread safety: none. All calls are expected on one thread; a set_state()
    call and its whole cascade complete before it returns.
    """

    def __init__(
        self,
        storage: Optional[DurableStorage] = None,
        event_bus: Optional[EventBus] = None,
        config: Optional[StoreConfig] = None,
    ):
        """
        Args:
            storage: Durable backend. Defaults to an in-memory store.
            event_bus: Bus for 'state:change' and 'achievement:unlock'.
            config: Store constants. Defaults to the installed StoreConfig.
        """
        self.config = config or get_store_config()
        self.storage = storage if storage is not None else MemoryStorage(self.config.storage_prefix)
        self.event_bus = event_bus if event_bus is not None else EventBus()

        self.path_store = PathStore()
        self.subscriptions = SubscriptionRegistry(self.path_store, self.config.max_cascade_depth)
        self.persistence = PersistenceBridge(self.storage)
        self.snapshots = SnapshotService(self)
        self._z_index = self.config.initial_z_index
        self._initialized = False

    @property
    def z_index(self) -> int:
        """Highest zIndex handed out so far."""
        return self._z_index

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def fields(self) -> StateProxy:
        return StateProxy(self.path_store)

    def initialize(self) -> None:
        """Overlay persisted values onto the default tree."""
        self.persistence.hydrate(self.path_store)
        self._initialized = True
        logger.info(f"StateManager initialized with {len(self.get_state('icons', []))} icons")

    # ========== CORE PRIMITIVES ==========

    def get_state(self, path: str = '', default: Any = None) -> Any:
        """Value at a dotted path, or `default` if any segment is missing.

        An empty path returns the whole tree by reference.
        """
        return self.path_store.get_state(path, default)

    def set_state(self, path: str, value: Any, persist: bool = False) -> None:
        """Write a value, notify observers, and optionally persist it.

        Only paths in PERSISTENCE_KEYS are ever written to storage; persist=True
        on any other path is silently ignored.

        Raises:
            CascadeDepthError: subscriber re-entrancy ran past the configured limit.
        """
        written, old_value = self.path_store.assign(path, value)
        if not written:
            return

        self.event_bus.emit(Events.STATE_CHANGE, {'path': path, 'value': value, 'oldValue': old_value})
        self.subscriptions.notify(path, value)

        if persist:
            self.persistence.persist(path, value)

    def subscribe(self, path: str, callback: StateCallback) -> Callable[[], None]:
        """Observe a path. Returns the matching unsubscribe function."""
        return self.subscriptions.subscribe(path, callback)

    def reset(self, on_restart: Optional[Callable[['StateManager'], None]] = None) -> None:
        """Wipe all persisted data and rebuild from defaults.

        Unconditional and irreversible; confirmation is the caller's job.
        Subscribers stay registered. `on_restart` runs after the rebuild so a
        host can relaunch whatever it needs.
        """
        self.storage.clear()
        self.path_store.replace_tree(default_tree())
        self._z_index = self.config.initial_z_index
        self.initialize()
        logger.warning("State reset: storage cleared and defaults restored")
        self.event_bus.emit(Events.STATE_RESET, {})
        if on_restart is not None:
            on_restart(self)

    # ========== SNAPSHOTS ==========

    def export_complete_state(self) -> Dict[str, Any]:
        return self.snapshots.export_complete_state()

    def import_complete_state(self, data: Any) -> ImportResult:
        return self.snapshots.import_complete_state(data)

    def export_state(self) -> Dict[str, Any]:
        return self.snapshots.export_state()

    def import_state(self, data: Dict[str, Any]) -> ImportResult:
        return self.snapshots.import_state(data)

    def save_snapshot_to_file(self, filepath: Union[str, Path]) -> Dict[str, Any]:
        return self.snapshots.save_snapshot_to_file(filepath)

    def load_snapshot_from_file(self, filepath: Union[str, Path]) -> ImportResult:
        return self.snapshots.load_snapshot_from_file(filepath)
