"""
Configuration management for store-agent.
"""

import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

import yaml

from storeagent.providers.base import ChatOptions

log = logging.getLogger(__name__)


DEFAULT_CONFIG = {
    "provider": "openai",
    "model": None,
    "temperature": 0.7,
    "max_tokens": 2048,
    "timeout": 60,
    "max_iterations": 5,
}


class ConfigStore(Protocol):
    """String-keyed settings store the core reads and writes."""

    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...


def config_home() -> Path:
    """Directory holding config.yaml: $STOREAGENT_HOME or ~/.storeagent."""
    home = os.environ.get("STOREAGENT_HOME")
    if home:
        return Path(home).expanduser()
    return Path.home() / ".storeagent"


def default_config_path() -> Path:
    return config_home() / "config.yaml"


def load_config(path: Optional[Path] = None) -> Dict:
    """
    Load configuration from a YAML file.

    Missing or unreadable files fall back to DEFAULT_CONFIG; user values
    are merged over the defaults.
    """
    if path is None:
        path = default_config_path()

    if not Path(path).exists():
        return DEFAULT_CONFIG.copy()

    try:
        with open(path) as f:
            user_config = yaml.safe_load(f) or {}
    except (yaml.YAMLError, IOError) as e:
        log.warning("Ignoring unreadable config %s: %s", path, e)
        return DEFAULT_CONFIG.copy()

    if not isinstance(user_config, dict):
        log.warning("Ignoring config %s: top level is not a mapping", path)
        return DEFAULT_CONFIG.copy()

    return {**DEFAULT_CONFIG, **user_config}


def save_config(path: Path, config: Dict):
    """Save configuration to a YAML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w') as f:
        yaml.safe_dump(config, f, default_flow_style=False, sort_keys=False)


class MemoryConfigStore:
    """In-process ConfigStore."""

    def __init__(self, values: Optional[Dict] = None):
        self._values: Dict[str, Any] = {**DEFAULT_CONFIG, **(values or {})}
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            value = self._values.get(key)
        return default if value is None else value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._values[key] = value

    def as_dict(self) -> Dict:
        with self._lock:
            return dict(self._values)


class YamlConfigStore(MemoryConfigStore):
    """ConfigStore persisted to a YAML file; every set() writes through."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else default_config_path()
        super().__init__(load_config(self.path))

    def set(self, key: str, value: Any) -> None:
        super().set(key, value)
        save_config(self.path, self.as_dict())


def chat_options_from_config(store: ConfigStore, **overrides) -> ChatOptions:
    """Build ChatOptions from stored generation defaults."""
    values = {
        "model": store.get("model"),
        "temperature": float(store.get("temperature", DEFAULT_CONFIG["temperature"])),
        "max_tokens": int(store.get("max_tokens", DEFAULT_CONFIG["max_tokens"])),
        "timeout_seconds": int(store.get("timeout", DEFAULT_CONFIG["timeout"])),
    }
    values.update({k: v for k, v in overrides.items() if v is not None})
    return ChatOptions(**values)
