"""
Key/value storage backing the portal session.

Values are plain strings, the same contract a browser's localStorage offers.
"""
import json
import logging
import os
from typing import Dict, Optional

logger = logging.getLogger(__name__)

class SessionStorage:
    """Interface for string key/value session storage."""

    def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove_item(self, key: str) -> None:
        raise NotImplementedError


class MemoryStorage(SessionStorage):
    """In-process storage; lost when the process exits."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileStorage(SessionStorage):
    """
    Storage persisted as a JSON object in a single file.

    The file is re-read on every access so several processes can share one
    session file. An unreadable or corrupted file is treated as empty.
    """

    def __init__(self, path: str):
        self.path = path

    def _load(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable session file {self.path}: {str(e)}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring session file {self.path}: expected a JSON object")
            return {}
        return {key: value for key, value in data.items() if isinstance(value, str)}

    def _save(self, items: Dict[str, str]) -> None:
        with open(self.path, "w", encoding="utf-8") as handle:
            json.dump(items, handle)

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._load()
        items[key] = value
        self._save(items)

    def remove_item(self, key: str) -> None:
        items = self._load()
        if key in items:
            del items[key]
            self._save(items)
