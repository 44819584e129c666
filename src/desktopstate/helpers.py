"""
Domain helpers for windows, icons, the recycle bin, achievements and settings.

These are expressed purely through get_state()/set_state(), but they enforce
invariants the raw primitives do not:

- every window gets a unique zIndex drawn from one monotonically increasing
  counter;
- recycle/restore move a record between collections rather than copying it;
- unlock_achievement() keeps the achievement list duplicate-free.

Collections are always replaced with new lists, never mutated in place, so
subscribers holding the previous list see a stable value.
"""
import logging
import time
from typing import Any, Dict, List, Optional

from desktopstate.defaults import RECYCLED_FILE_TYPE
from desktopstate.events import Events

logger = logging.getLogger(__name__)


class DomainHelpersMixin:
    """Mixed into StateManager; relies on get_state, set_state, event_bus and _z_index."""

    _z_index: int

    # ========== WINDOWS ==========

    def _next_z_index(self) -> int:
        self._z_index += 1
        return self._z_index

    def add_window(self, window_data: Dict[str, Any]) -> Dict[str, Any]:
        """Open a window record on top of the stack.

        Returns:
            The stored record, the only place the caller learns its zIndex.
        """
        window = {
            **window_data,
            'zIndex': self._next_z_index(),
            'minimized': False,
            'maximized': False,
        }
        self.set_state('windows', [*self.get_state('windows', []), window])
        self.set_state('ui.activeWindow', window.get('id'))
        logger.debug(f"Added window {window.get('id')!r} at zIndex {window['zIndex']}")
        return window

    def remove_window(self, window_id: Any) -> None:
        """Close a window.

        If it was active, the last remaining window by insertion order becomes
        active (not the highest zIndex). Call focus_window() for z-order focus.
        """
        windows = [w for w in self.get_state('windows', []) if w.get('id') != window_id]
        self.set_state('windows', windows)
        if self.get_state('ui.activeWindow') == window_id:
            self.set_state('ui.activeWindow', windows[-1].get('id') if windows else None)

    def get_window(self, window_id: Any) -> Optional[Dict[str, Any]]:
        for window in self.get_state('windows', []):
            if window.get('id') == window_id:
                return window
        return None

    def update_window(self, window_id: Any, updates: Dict[str, Any]) -> None:
        """Shallow-merge `updates` into one window record."""
        windows = [
            {**w, **updates} if w.get('id') == window_id else w
            for w in self.get_state('windows', [])
        ]
        self.set_state('windows', windows)

    def focus_window(self, window_id: Any) -> None:
        """Bring a window to the front and un-minimize it."""
        self.update_window(window_id, {'zIndex': self._next_z_index(), 'minimized': False})
        self.set_state('ui.activeWindow', window_id)

    # ========== ICONS ==========

    def add_icon(self, icon: Dict[str, Any]) -> None:
        self.set_state('icons', [*self.get_state('icons', []), icon], True)

    def update_icon_position(self, icon_id: str, x: float, y: float) -> None:
        icons = [
            {**icon, 'x': x, 'y': y} if icon.get('id') == icon_id else icon
            for icon in self.get_state('icons', [])
        ]
        self.set_state('icons', icons, True)

    def set_file_position(self, file_path: str, x: float, y: float) -> None:
        """Record a layout override for a file icon.

        The whole mapping is rewritten because file paths contain dots and
        cannot be addressed as path segments.
        """
        positions = dict(self.get_state('filePositions') or {})
        positions[file_path] = {'x': x, 'y': y}
        self.set_state('filePositions', positions, True)

    # ========== RECYCLE BIN ==========

    def recycle_icon(self, icon_id: str) -> None:
        """Move an icon from the desktop to the end of the recycle bin.

        No-op if no icon has this id.
        """
        icons = self.get_state('icons', [])
        icon = next((i for i in icons if i.get('id') == icon_id), None)
        if icon is None:
            logger.debug(f"recycle_icon: no icon {icon_id!r}")
            return
        self.set_state('recycledItems', [*self.get_state('recycledItems', []), icon], True)
        self.set_state('icons', [i for i in icons if i.get('id') != icon_id], True)

    def restore_icon(self, index: int) -> None:
        """Move recycledItems[index] back to the end of the desktop icons.

        Positional: the index must come from the list as it is now.
        No-op if out of range.
        """
        recycled = self.get_state('recycledItems', [])
        if not 0 <= index < len(recycled):
            logger.debug(f"restore_icon: index {index} out of range ({len(recycled)} items)")
            return
        item = recycled[index]
        self.set_state('icons', [*self.get_state('icons', []), item], True)
        self.set_state('recycledItems', [r for i, r in enumerate(recycled) if i != index], True)

    def recycle_file(
        self,
        original_path: str,
        label: str,
        file_type: str = 'file',
        extension: str = '',
        content: Any = None,
        emoji: str = '📄',
    ) -> Dict[str, Any]:
        """Append a deleted file-system entry to the recycle bin and return it."""
        deleted_at = int(time.time() * 1000)
        item = {
            'id': f'recycled_{deleted_at}_{len(self.get_state("recycledItems", []))}',
            'label': label,
            'emoji': emoji,
            'type': RECYCLED_FILE_TYPE,
            'originalPath': original_path,
            'fileType': file_type,
            'extension': extension,
            'content': content,
            'deletedAt': deleted_at,
        }
        self.set_state('recycledItems', [*self.get_state('recycledItems', []), item], True)
        return item

    def empty_recycle_bin(self) -> int:
        """Permanently drop everything in the bin. Returns the number removed."""
        count = len(self.get_state('recycledItems', []))
        self.set_state('recycledItems', [], True)
        return count

    # ========== ACHIEVEMENTS ==========

    def has_achievement(self, achievement_id: str) -> bool:
        return achievement_id in self.get_state('achievements', [])

    def unlock_achievement(self, achievement_id: str) -> bool:
        """Unlock once.

        Returns:
            True if newly unlocked (persisted, event emitted), False if it was
            already unlocked (nothing happens).
        """
        if self.has_achievement(achievement_id):
            return False
        achievements: List[str] = [*self.get_state('achievements', []), achievement_id]
        self.set_state('achievements', achievements, True)
        self.event_bus.emit(Events.ACHIEVEMENT_UNLOCK, {'id': achievement_id})
        logger.info(f"Achievement unlocked: {achievement_id}")
        return True

    # ========== SETTINGS ==========

    def toggle_setting(self, setting_path: str) -> bool:
        """Flip settings.<setting_path> and persist it. Returns the new value."""
        full_path = f'settings.{setting_path}'
        new_value = not self.get_state(full_path)
        self.set_state(full_path, new_value, True)
        return new_value
