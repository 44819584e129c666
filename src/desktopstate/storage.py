"""
Durable key-value storage backends.

All values round-trip through JSON, so a stored value never aliases a live
object in the state tree. Keys written through get()/set() are namespaced
with a prefix; get_raw()/set_raw() address the unprefixed keys that other
subsystems own (calendar events, saved games).

Write failures are contained here: set() logs and returns False, and the
caller's in-memory tree keeps whatever it already committed.
"""
import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from desktopstate.exceptions import StorageWriteError

logger = logging.getLogger(__name__)

# Typical browser-style quota, used only for usage reporting
DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024


class DurableStorage(ABC):
    """Flat, prefixed key namespace holding JSON values."""

    def __init__(self, prefix: str = 'illuminatos_'):
        self.prefix = prefix

    # ---- backend primitives (full keys, serialized text) ----

    @abstractmethod
    def _read(self, full_key: str) -> Optional[str]:
        """Return serialized text or None if absent."""

    @abstractmethod
    def _write(self, full_key: str, text: str) -> None:
        """Store serialized text. May raise StorageWriteError or OSError."""

    @abstractmethod
    def _delete(self, full_key: str) -> None:
        ...

    @abstractmethod
    def _all_keys(self) -> List[str]:
        ...

    # ---- public API ----

    def get_key(self, key: str) -> str:
        return f'{self.prefix}{key}'

    def get(self, key: str, default: Any = None) -> Any:
        return self._load(self.get_key(key), default)

    def set(self, key: str, value: Any) -> bool:
        return self._store(self.get_key(key), key, value)

    def remove(self, key: str) -> None:
        self._delete(self.get_key(key))

    def has(self, key: str) -> bool:
        return self._read(self.get_key(key)) is not None

    def keys(self) -> List[str]:
        """Unprefixed names of every key in this namespace."""
        n = len(self.prefix)
        return [k[n:] for k in self._all_keys() if k.startswith(self.prefix)]

    def clear(self) -> None:
        """Remove every prefixed key. Raw keys are left alone."""
        for full_key in [k for k in self._all_keys() if k.startswith(self.prefix)]:
            self._delete(full_key)
        logger.debug(f"Cleared storage namespace '{self.prefix}'")

    def get_raw(self, key: str, default: Any = None) -> Any:
        """Read an unprefixed key. Non-JSON text is returned as-is."""
        text = self._read(key)
        if text is None:
            return default
        try:
            return json.loads(text)
        except ValueError:
            return text

    def set_raw(self, key: str, value: Any) -> bool:
        """Write an unprefixed key. None removes it."""
        if value is None:
            self._delete(key)
            return True
        return self._store(key, key, value)

    def _load(self, full_key: str, default: Any) -> Any:
        text = self._read(full_key)
        if text is None:
            return default
        try:
            return json.loads(text)
        except ValueError as e:
            logger.error(f"Error reading '{full_key}': {e}")
            return default

    def _store(self, full_key: str, display_key: str, value: Any) -> bool:
        try:
            text = json.dumps(value)
            self._write(full_key, text)
            return True
        except StorageWriteError as e:
            logger.error(f"Storage quota exceeded writing '{display_key}': {e}")
            return False
        except (TypeError, ValueError, OSError) as e:
            logger.error(f"Error setting '{display_key}': {e}")
            return False

    def get_usage(self, quota: int = DEFAULT_QUOTA_BYTES) -> Dict[str, Any]:
        """Approximate usage across all keys (UTF-16 sizing)."""
        used = 0
        for full_key in self._all_keys():
            text = self._read(full_key) or ''
            used += (len(full_key) + len(text)) * 2
        return {
            'used': used,
            'total': quota,
            'available': quota - used,
            'percentUsed': round(used / quota * 100, 2),
        }

    def export_all(self) -> str:
        """Every prefixed key as one JSON document."""
        return json.dumps({key: self.get(key) for key in self.keys()}, indent=2)

    def import_all(self, text: str) -> bool:
        try:
            data = json.loads(text)
        except ValueError as e:
            logger.error(f"Storage import failed: {e}")
            return False
        if not isinstance(data, dict):
            logger.error("Storage import failed: expected a JSON object")
            return False
        return all([self.set(key, value) for key, value in data.items()])


class MemoryStorage(DurableStorage):
    """Dict-backed storage. quota_bytes simulates a full backend."""

    def __init__(self, prefix: str = 'illuminatos_', quota_bytes: Optional[int] = None):
        super().__init__(prefix)
        self._data: Dict[str, str] = {}
        self.quota_bytes = quota_bytes

    def _read(self, full_key: str) -> Optional[str]:
        return self._data.get(full_key)

    def _write(self, full_key: str, text: str) -> None:
        if self.quota_bytes is not None:
            size = sum(len(k) + len(v) for k, v in self._data.items() if k != full_key)
            if size + len(full_key) + len(text) > self.quota_bytes:
                raise StorageWriteError(f"{self.quota_bytes} byte quota reached")
        self._data[full_key] = text

    def _delete(self, full_key: str) -> None:
        self._data.pop(full_key, None)

    def _all_keys(self) -> List[str]:
        return list(self._data)


class JsonFileStorage(DurableStorage):
    """Storage mirrored into a single JSON file.

    The file holds {full_key: serialized_text}. It is rewritten on every
    change via a temp file and rename.
    """

    def __init__(self, path: Union[str, Path], prefix: str = 'illuminatos_'):
        super().__init__(prefix)
        self.path = Path(path)
        self._data: Dict[str, str] = self._load_file()

    def _load_file(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open('r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Corrupted storage file {self.path}, starting empty: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Storage file {self.path} is not an object, starting empty")
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + '.tmp')
        with tmp.open('w', encoding='utf-8') as f:
            json.dump(self._data, f, indent=2)
        os.replace(tmp, self.path)

    def _read(self, full_key: str) -> Optional[str]:
        return self._data.get(full_key)

    def _write(self, full_key: str, text: str) -> None:
        previous = self._data.get(full_key)
        self._data[full_key] = text
        try:
            self._flush()
        except OSError:
            if previous is None:
                self._data.pop(full_key, None)
            else:
                self._data[full_key] = previous
            raise

    def _delete(self, full_key: str) -> None:
        if self._data.pop(full_key, None) is not None:
            try:
                self._flush()
            except OSError as e:
                logger.error(f"Failed to persist removal of '{full_key}': {e}")

    def _all_keys(self) -> List[str]:
        return list(self._data)
