"""
Key-value stores for small pieces of persisted state (the match best time).
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from loguru import logger

BEST_TIME_KEY = "intellideck-match-best-time"


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any) -> None: ...


class MemoryStore:
    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Optional[Any]:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value


class JsonFileStore:
    """Keeps all keys in one JSON object on disk, rewritten on every set"""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open('r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable store {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> Optional[Any]:
        return self._read().get(key)

    def set(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open('w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)


class BestTimeStore:
    """Single best duration in milliseconds under a fixed key"""

    def __init__(self, store: KeyValueStore, key: str = BEST_TIME_KEY):
        self.store = store
        self.key = key

    def get(self) -> Optional[int]:
        value = self.store.get(self.key)
        if value is None:
            return None
        try:
            return int(float(value))
        except (TypeError, ValueError):
            logger.warning(f"Discarding malformed best time {value!r}")
            return None

    def record(self, duration_ms: int) -> bool:
        """Store duration_ms if it beats the saved best; True when it did"""
        best = self.get()
        if best is not None and duration_ms >= best:
            return False
        self.store.set(self.key, duration_ms)
        logger.info(f"New best match time: {duration_ms} ms")
        return True
