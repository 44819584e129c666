"""
In-process event bus for cross-cutting listeners.

Listeners that don't want path subscriptions hear about every write through
`state:change` and about achievements through `achievement:unlock`. Delivery
is fire-and-forget: a failing handler is logged and skipped.
"""
import logging
from typing import Any, Callable, Dict, List, Tuple

logger = logging.getLogger(__name__)

EventHandler = Callable[[Dict[str, Any]], None]


class Events:
    """Event names emitted by the state store."""
    STATE_CHANGE = 'state:change'
    ACHIEVEMENT_UNLOCK = 'achievement:unlock'
    STATE_RESET = 'state:reset'
    STATE_IMPORT = 'state:import'


class EventBus:
    """Dispatches payload dicts to handlers by event name.

    A handler registered on 'state:*' receives every event whose name starts
    with 'state:'. A lone '*' receives everything.
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[EventHandler]] = {}
        self._once: List[Tuple[str, EventHandler]] = []

    def on(self, event_name: str, handler: EventHandler) -> Callable[[], None]:
        """Register a handler. Returns a function that removes it."""
        self._handlers.setdefault(event_name, []).append(handler)
        return lambda: self.off(event_name, handler)

    def once(self, event_name: str, handler: EventHandler) -> Callable[[], None]:
        """Register a handler that fires at most once."""
        self._once.append((event_name, handler))
        return self.on(event_name, handler)

    def off(self, event_name: str, handler: EventHandler) -> None:
        handlers = self._handlers.get(event_name)
        if handlers and handler in handlers:
            handlers.remove(handler)
            if not handlers:
                del self._handlers[event_name]
        if (event_name, handler) in self._once:
            self._once.remove((event_name, handler))

    def listener_count(self, event_name: str) -> int:
        return len(self._handlers.get(event_name, []))

    def _matching(self, event_name: str) -> List[Tuple[str, EventHandler]]:
        matched = []
        for pattern, handlers in self._handlers.items():
            if pattern == event_name or pattern == '*' or (
                pattern.endswith(':*') and event_name.startswith(pattern[:-1])
            ):
                matched.extend((pattern, h) for h in handlers)
        return matched

    def emit(self, event_name: str, payload: Dict[str, Any]) -> None:
        """Deliver `payload` to every matching handler."""
        for pattern, handler in self._matching(event_name):
            if (pattern, handler) in self._once:
                self.off(pattern, handler)
            try:
                handler(payload)
            except Exception as e:
                logger.warning(f"Error in '{pattern}' handler for event '{event_name}': {e}")
