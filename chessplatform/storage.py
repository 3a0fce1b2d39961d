"""A small thread-safe key-value store persisted as one JSON document.

This is the persistence sink the sessions and statistics write to. The
move decision core never touches it.

Usage (example):

    from chessplatform.storage import JsonStore

    store = JsonStore(".cache/chessplatform.json")
    stats = store.get("chessStats", {})
    store.set("chessStats", stats)

Passing ``path=None`` keeps everything in memory, which is what the tests
use.
"""
from __future__ import annotations

import json
import logging
import os
import threading
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class JsonStore:
    def __init__(self, path: Optional[str] = None):
        self.path = path
        self._lock = threading.Lock()
        self._data: Dict[str, Any] = self._load()

    def _load(self) -> Dict[str, Any]:
        if not self.path or not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable store %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring store %s: top level is not an object", self.path)
            return {}
        return data

    def _flush(self) -> None:
        if not self.path:
            return
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp = self.path + ".tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(self._data, f, indent=2)
        os.replace(tmp, self.path)

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            value = self._data.get(key, default)
            # hand out copies so callers cannot mutate stored state in place
            return json.loads(json.dumps(value))

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = json.loads(json.dumps(value))
            self._flush()

    def remove(self, key: str) -> None:
        with self._lock:
            if self._data.pop(key, None) is not None:
                self._flush()

    def clear(self) -> None:
        with self._lock:
            self._data.clear()
            self._flush()

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._data
