"""
Read-only attribute access over the state tree.

    manager.fields.settings.pet.enabled   # same as get_state('settings.pet.enabled')
    manager.fields.filePositions['/docs/a.txt'].x

Branches come back as further proxies so chains read naturally; leaves come
back as plain values. Keys that aren't valid identifiers (file paths, list
indices) use item syntax, and may contain dots.
"""
from typing import TYPE_CHECKING, Any, Iterator, MutableMapping, MutableSequence, Tuple

if TYPE_CHECKING:
    from desktopstate.path_store import PathStore


class StateProxy:
    """Lazy view of one node in a PathStore. Every access re-reads live state."""

    def __init__(self, store: 'PathStore', segments: Tuple[str, ...] = ()):
        object.__setattr__(self, '_store', store)
        object.__setattr__(self, '_segments', segments)

    def _resolve(self, key: Any) -> Any:
        segments = self._segments + (str(key),)
        if not self._store.has_segments(segments):
            raise KeyError('.'.join(segments))
        value = self._store.get_segments(segments)
        if isinstance(value, (MutableMapping, MutableSequence)):
            return StateProxy(self._store, segments)
        return value

    def __getattr__(self, name: str) -> Any:
        if name.startswith('__'):
            raise AttributeError(name)
        try:
            return self._resolve(name)
        except KeyError as e:
            raise AttributeError(f"No state at '{e.args[0]}'") from None

    def __getitem__(self, key: Any) -> Any:
        return self._resolve(key)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("StateProxy is read-only. Use set_state(path, value) to write.")

    def __iter__(self) -> Iterator[Any]:
        return iter(self.value())

    def __len__(self) -> int:
        return len(self.value())

    def __repr__(self) -> str:
        return f"StateProxy({'.'.join(self._segments)!r})"

    def value(self) -> Any:
        """The raw value at this proxy's node."""
        return self._store.get_segments(self._segments)
