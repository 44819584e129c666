"""Built-in defaults for the state tree."""

import copy
from typing import Any, Dict, List

# Desktop icons used when no saved icon layout exists
DEFAULT_ICONS: List[Dict[str, Any]] = [
    # System column
    {'id': 'mycomputer', 'label': 'My Computer', 'emoji': '💻', 'type': 'app', 'x': 20, 'y': 20},
    {'id': 'recyclebin', 'label': 'Recycle Bin', 'emoji': '🗑️', 'type': 'app', 'x': 20, 'y': 110},
    {'id': 'terminal', 'label': 'Terminal', 'emoji': '📟', 'type': 'app', 'x': 20, 'y': 200},
    {'id': 'ciphers', 'label': 'Cipher Decoder', 'emoji': '🔍', 'type': 'link', 'x': 20, 'y': 290,
     'url': 'https://sethmorrow.com/ciphers'},
    # Content column
    {'id': 'music', 'label': 'Music', 'emoji': '🎵', 'type': 'link', 'x': 20, 'y': 380,
     'url': 'https://sethmorrow.com/music'},
    {'id': 'videos', 'label': 'Videos', 'emoji': '📺', 'type': 'link', 'x': 20, 'y': 470,
     'url': 'https://sethmorrow.com/videos'},
    {'id': 'books', 'label': 'Books', 'emoji': '📚', 'type': 'link', 'x': 20, 'y': 560,
     'url': 'https://sethmorrow.com/books'},
    {'id': 'audiobooks', 'label': 'Audiobooks', 'emoji': '🎧', 'type': 'link', 'x': 20, 'y': 650,
     'url': 'https://sethmorrow.com/audiobooks'},
]

RECYCLED_FILE_TYPE = 'recycled_file'


def default_icons() -> List[Dict[str, Any]]:
    """Fresh copy of DEFAULT_ICONS, safe to mutate."""
    return copy.deepcopy(DEFAULT_ICONS)


def default_tree() -> Dict[str, Any]:
    """Construct the state tree with built-in defaults.

    Icons start empty; hydration fills them from storage or DEFAULT_ICONS.
    """
    return {
        'icons': [],
        'filePositions': {},
        'windows': [],
        'menuItems': [],
        'recycledItems': [],
        'achievements': [],
        'settings': {
            'sound': False,
            'crtEffect': True,
            'pet': {
                'enabled': False,
                'type': '🐕',
            },
            'screensaverDelay': 300000,
        },
        'user': {
            'isAdmin': False,     # session-only
            'hasVisited': False,
        },
        'ui': {
            'activeWindow': None,
            'startMenuOpen': False,
            'contextMenuOpen': False,
            'clippyVisible': False,
        },
    }
