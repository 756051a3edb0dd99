"""Key/value stores for persisting reporter state between page views."""

import json
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """String key/value storage, modelled on browser local storage."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value or None when the key is absent."""
        pass

    @abstractmethod
    def set_item(self, key: str, value: str):
        """Overwrite the value stored under key."""
        pass


class MemoryStore(KeyValueStore):
    """Process-local store. Contents are lost when the process exits."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str):
        self._data[key] = value


class JsonFileStore(KeyValueStore):
    """Store backed by a single JSON object on disk.

    Read and write errors propagate as ``OSError`` or ``ValueError``; callers
    decide whether a failing store is fatal.
    """

    def __init__(self, data_path: Optional[Path] = None):
        self.data_path = Path(data_path) if data_path else Path.home() / ".hb-analytics" / "storage.json"
        self._lock = threading.Lock()

    def _load_data(self) -> Dict[str, str]:
        """Load all stored values."""
        if not self.data_path.exists():
            return {}
        with open(self.data_path, 'r') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Storage file {self.data_path} does not hold a JSON object")
        return data

    def _save_data(self, data: Dict[str, str]):
        """Save all values."""
        self.data_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.data_path, 'w') as f:
            json.dump(data, f, indent=2)

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            value = self._load_data().get(key)
        if value is not None and not isinstance(value, str):
            raise ValueError(f"Stored value for {key} is not a string")
        return value

    def set_item(self, key: str, value: str):
        with self._lock:
            data = self._load_data()
            data[key] = value
            self._save_data(data)
        logger.debug(f"Stored {key} in {self.data_path}")
