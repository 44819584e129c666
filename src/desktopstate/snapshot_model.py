"""
Dataclasses for the complete-system snapshot format.

A snapshot is a plain JSON document; these types describe its metadata
header and the structured result of importing one.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

SNAPSHOT_TYPE = 'complete-snapshot'

# displaySettings entries, each stored under its own durable key of the same name
DISPLAY_KEYS = (
    'desktopBg',
    'desktopWallpaper',
    'colorScheme',
    'screensaverType',
    'screensaverDelay',
    'windowAnimations',
    'menuShadows',
    'smoothScrolling',
    'iconSize',
    'energySaving',
)

# Durable keys owned by other subsystems
FILE_SYSTEM_KEY = 'fileSystem'
ADMIN_PASSWORD_KEY = 'adminPassword'
BACKGROUND_KEY = 'desktopBg'
PLAYLIST_KEY = 'mediaPlayerPlaylist'
SKIFREE_KEY = 'skifree_highscore'
SNAKE_KEY = 'snakeHigh'
NOTEPAD_KEY = 'notepadContent'
CLIPPY_KEY = 'clippyDismissed'

# Unprefixed keys written directly by apps
CALENDAR_RAW_KEY = 'smos_calendar_events'
CLOCK_RAW_KEY = 'smos_clock_alarms'
ZORK_RAW_KEY = 'zork_save'

LEGACY_WARNING = 'Imported as legacy backup (partial state)'
INVALID_FORMAT_ERROR = 'Invalid snapshot format'


@dataclass(frozen=True)
class SnapshotMeta:
    """The `_meta` header stamped on every complete snapshot."""
    version: str
    type: str
    timestamp: str
    exported_from: str

    @classmethod
    def create(cls, version: str, exported_from: str) -> 'SnapshotMeta':
        """New header timestamped now (UTC, ISO-8601)."""
        now = datetime.now(timezone.utc)
        return cls(
            version=version,
            type=SNAPSHOT_TYPE,
            timestamp=now.isoformat(timespec='milliseconds').replace('+00:00', 'Z'),
            exported_from=exported_from,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'version': self.version,
            'type': self.type,
            'timestamp': self.timestamp,
            'exportedFrom': self.exported_from,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SnapshotMeta':
        """Tolerant parse; missing fields become empty strings."""
        return cls(
            version=str(data.get('version', '')),
            type=str(data.get('type', '')),
            timestamp=str(data.get('timestamp', '')),
            exported_from=str(data.get('exportedFrom', '')),
        )


@dataclass
class ImportResult:
    """Outcome of a snapshot import. Callers must branch on `success`."""
    success: bool
    error: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    legacy: bool = False
    meta: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """JSON form; unset optional fields are omitted."""
        result: Dict[str, Any] = {'success': self.success}
        if self.error is not None:
            result['error'] = self.error
        if self.success or self.warnings:
            result['warnings'] = list(self.warnings)
        if self.legacy:
            result['legacy'] = True
        if self.meta is not None:
            result['meta'] = self.meta
        return result
