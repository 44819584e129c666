"""
PathStore: the nested state tree and dotted-path primitives.

Paths address nodes with dot-delimited segments ('settings.pet.enabled').
Mapping segments are keys; sequence segments are integer indices
('windows.0.id'). Reads never raise. Writes auto-create missing intermediate
mappings, keyed on presence rather than truthiness, so a stored 0, '' or
False is never mistaken for an absent branch.
"""
import copy
import logging
from typing import Any, Dict, List, MutableMapping, MutableSequence, Optional, Sequence, Tuple

from desktopstate.defaults import default_tree

logger = logging.getLogger(__name__)

_MISSING = object()


def split_path(path: str) -> List[str]:
    """Split a dotted path into segments. Empty path has no segments."""
    return path.split('.') if path else []


def parent_paths(path: str) -> List[str]:
    """Ancestor paths of `path`, nearest first.

    'settings.pet.enabled' -> ['settings.pet', 'settings']
    """
    parts = split_path(path)
    ancestors = []
    while len(parts) > 1:
        parts.pop()
        ancestors.append('.'.join(parts))
    return ancestors


def _child(node: Any, segment: str) -> Any:
    """Return node[segment] or _MISSING."""
    if isinstance(node, MutableMapping):
        return node.get(segment, _MISSING)
    if isinstance(node, (list, tuple)):
        try:
            index = int(segment)
        except ValueError:
            return _MISSING
        if -len(node) <= index < len(node):
            return node[index]
    return _MISSING


def _is_container(value: Any) -> bool:
    return isinstance(value, (MutableMapping, MutableSequence))


class PathStore:
    """Holds the state tree and resolves dotted paths against it.

    The tree is handed out by reference; callers must not assume the returned
    objects are immutable snapshots.
    """

    def __init__(self, tree: Optional[Dict[str, Any]] = None):
        self._tree: Dict[str, Any] = tree if tree is not None else default_tree()

    @property
    def tree(self) -> Dict[str, Any]:
        return self._tree

    def get_state(self, path: str = '', default: Any = None) -> Any:
        """Read the value at `path`.

        Args:
            path: Dotted path. Empty returns the whole tree.
            default: Returned when any segment is missing.
        """
        return self.get_segments(split_path(path), default)

    def get_segments(self, segments: Sequence[str], default: Any = None) -> Any:
        """Like get_state() but with pre-split segments, so keys may contain dots."""
        node: Any = self._tree
        for segment in segments:
            node = _child(node, segment)
            if node is _MISSING:
                return default
        return node

    def has_path(self, path: str) -> bool:
        return self.get_state(path, _MISSING) is not _MISSING

    def has_segments(self, segments: Sequence[str]) -> bool:
        return self.get_segments(segments, _MISSING) is not _MISSING

    def assign(self, path: str, value: Any) -> Tuple[bool, Any]:
        """Write `value` at `path`, creating intermediate mappings as needed.

        A list that can't be addressed by a segment (non-integer or
        out-of-range index) is promoted to a mapping keyed by its string
        indices, so the write always lands and reads back at `path`.

        Returns:
            (written, old_value). old_value is None when the key was absent.
            written is False only for the empty path; nothing is changed.
        """
        parts = split_path(path)
        if not parts:
            logger.warning("assign() called with empty path; use replace_tree() instead")
            return False, None
        *parents, last_key = parts

        holder: Any = None
        holder_key = ''
        node: Any = self._tree
        for segment in parents:
            node = self._addressable(holder, holder_key, node, segment, path)
            child = _child(node, segment)
            if not _is_container(child):
                if child is not _MISSING and child is not None:
                    logger.warning(
                        f"Replacing non-container value {child!r} at segment '{segment}' of '{path}'"
                    )
                child = {}
                self._put(node, segment, child)
            holder, holder_key, node = node, segment, child

        node = self._addressable(holder, holder_key, node, last_key, path)
        old_value = _child(node, last_key)
        self._put(node, last_key, value)
        return True, (None if old_value is _MISSING else old_value)

    def _addressable(self, holder: Any, holder_key: str, node: Any, segment: str, path: str) -> Any:
        """Return `node`, promoted to a mapping if `segment` can't index it."""
        if isinstance(node, MutableMapping) or _child(node, segment) is not _MISSING:
            return node
        logger.warning(f"Segment '{segment}' can't index a list in '{path}'; converting it to a mapping")
        promoted = {str(i): item for i, item in enumerate(node)}
        if holder is None:
            self._tree = promoted
        else:
            self._put(holder, holder_key, promoted)
        return promoted

    @staticmethod
    def _put(node: Any, segment: str, value: Any) -> None:
        if isinstance(node, MutableMapping):
            node[segment] = value
        else:
            node[int(segment)] = value

    def replace_tree(self, tree: Dict[str, Any]) -> None:
        """Swap the whole tree reference."""
        self._tree = tree

    def snapshot_tree(self) -> Dict[str, Any]:
        """Deep copy of the current tree."""
        return copy.deepcopy(self._tree)
