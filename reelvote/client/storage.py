"""Durable local key/value storage (the client's "browser profile")."""
import json
import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Union

from reelvote.core.logging_config import get_logger

logger = get_logger(__name__)


class LocalStorage:
    """String key/value store with JSON helpers. Subclasses provide persistence."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError

    def get_json(self, key: str) -> Optional[Any]:
        raw = self.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("storage_value_corrupt", key=key)
            return None

    def set_json(self, key: str, value: Any) -> None:
        self.set(key, json.dumps(value))


class MemoryStorage(LocalStorage):
    """Process-lifetime storage; nothing survives a restart."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStorage(LocalStorage):
    """
    Storage backed by one JSON object on disk.

    The file is read once on first access and rewritten on every change via a
    temp file and ``os.replace`` so a crash never leaves it half written. Two
    instances pointed at the same path share a profile across restarts.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._data: Optional[Dict[str, str]] = None

    def _load(self) -> Dict[str, str]:
        if self._data is None:
            try:
                with self.path.open("r", encoding="utf-8") as f:
                    loaded = json.load(f)
                self._data = {str(k): str(v) for k, v in loaded.items()} if isinstance(loaded, dict) else {}
            except FileNotFoundError:
                self._data = {}
            except ValueError:
                logger.warning("storage_file_corrupt", path=str(self.path))
                self._data = {}
        return self._data

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as f:
            json.dump(self._data, f, indent=2, sort_keys=True)
        os.replace(tmp_path, self.path)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._load()
            if data.get(key) == value:
                return
            data[key] = value
            self._flush()

    def remove(self, key: str) -> None:
        with self._lock:
            if self._load().pop(key, None) is not None:
                self._flush()
