"""
Store configuration.

A single StoreConfig is installed at module level and used by every
StateManager that is not handed an explicit config. Tests and embedders
that need isolation pass their own instance instead.
"""

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class StoreConfig:
    """Tunable constants for the state store."""
    storage_prefix: str = 'illuminatos_'
    initial_z_index: int = 1000
    max_cascade_depth: int = 32
    snapshot_version: str = '2.0'
    exported_from: str = 'IlluminatOS!'

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StoreConfig':
        """Build a config from a dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


_store_config: Optional[StoreConfig] = None


def set_store_config(config: StoreConfig) -> None:
    """Install the process-wide default config."""
    global _store_config
    _store_config = config


def get_store_config() -> StoreConfig:
    """Return the installed config, creating the default on first use."""
    global _store_config
    if _store_config is None:
        _store_config = StoreConfig()
    return _store_config


def reset_store_config() -> None:
    global _store_config
    _store_config = None
