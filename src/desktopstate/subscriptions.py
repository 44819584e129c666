"""
SubscriptionRegistry: path-keyed observers with ancestor cascade.

Every write to a path runs two phases:

1. Exact match: callbacks on the written path receive (value, path).
2. Ancestor cascade: for each ancestor path ('a.b.c' -> 'a.b' -> 'a') that has
   subscribers, callbacks receive (live value re-read at the ancestor, path).
   The second argument always names the leaf that actually changed.

Cascades are synchronous. A callback that writes state starts a nested
cascade which finishes before the outer one resumes (depth-first). Nesting
is bounded by max_depth; exceeding it raises CascadeDepthError.
"""
import logging
from typing import Any, Callable, Dict, List, Optional

from desktopstate.exceptions import CascadeDepthError
from desktopstate.path_store import PathStore, parent_paths

logger = logging.getLogger(__name__)

StateCallback = Callable[[Any, str], None]


class _Subscription:
    """One registration. Identity distinguishes repeated registrations of the same callable."""
    __slots__ = ('path', 'callback')

    def __init__(self, path: str, callback: StateCallback):
        self.path = path
        self.callback = callback


class SubscriptionRegistry:
    """Observer lists keyed by dotted path."""

    def __init__(self, path_store: PathStore, max_depth: int = 32):
        self._path_store = path_store
        self._subscribers: Dict[str, List[_Subscription]] = {}
        self._max_depth = max_depth
        self._depth = 0

    @property
    def depth(self) -> int:
        """Current cascade nesting level (0 when idle)."""
        return self._depth

    def subscribe(self, path: str, callback: StateCallback) -> Callable[[], None]:
        """Register `callback` on `path`.

        Returns:
            Function that removes exactly this registration. Calling it more
            than once is harmless.
        """
        subscription = _Subscription(path, callback)
        self._subscribers.setdefault(path, []).append(subscription)
        logger.debug(f"Subscribed to '{path}' ({len(self._subscribers[path])} total)")

        def unsubscribe() -> None:
            subs = self._subscribers.get(path)
            if not subs:
                return
            for i, sub in enumerate(subs):
                if sub is subscription:
                    del subs[i]
                    break
            if not subs:
                del self._subscribers[path]

        return unsubscribe

    def subscriber_count(self, path: Optional[str] = None) -> int:
        if path is not None:
            return len(self._subscribers.get(path, []))
        return sum(len(subs) for subs in self._subscribers.values())

    def notify(self, path: str, value: Any) -> None:
        """Run the two-phase cascade for a write to `path`.

        Raises:
            CascadeDepthError: nested cascades exceeded max_depth.
        """
        if self._depth >= self._max_depth:
            raise CascadeDepthError(path, self._max_depth)

        self._depth += 1
        try:
            self._invoke(path, value, path)
            for ancestor in parent_paths(path):
                if ancestor in self._subscribers:
                    self._invoke(ancestor, self._path_store.get_state(ancestor), path)
        finally:
            self._depth -= 1

    def _invoke(self, registered_path: str, value: Any, changed_path: str) -> None:
        # Copy: callbacks may unsubscribe themselves mid-iteration
        for sub in list(self._subscribers.get(registered_path, ())):
            try:
                sub.callback(value, changed_path)
            except CascadeDepthError:
                raise
            except Exception as e:
                logger.warning(f"Error in subscriber for '{registered_path}' (changed '{changed_path}'): {e}")
