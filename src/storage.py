"""Persistence helpers: one JSON file per key under the data directory.

Keys mirror the browser build: "tasks" (active list), "deletedTasks"
(soft-deleted list) and "theme" (palette name). Each key is written
independently; there is no cross-key transaction.
"""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, List

TASKS_KEY = 'tasks'
DELETED_KEY = 'deletedTasks'
THEME_KEY = 'theme'

logger = logging.getLogger(__name__)


class Storage:
    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)

    def path_for(self, key: str) -> Path:
        return self.data_dir / f'{key}.json'

    def load(self, key: str, default: Any = None) -> Any:
        """Return the decoded value for key.

        Missing file -> default. Unreadable or malformed JSON is logged and
        also yields default; it is never surfaced as an error.
        """
        path = self.path_for(key)
        if not path.exists():
            return default
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("ignoring unreadable %s (%s): %s", key, path, exc)
            return default

    def load_list(self, key: str) -> List[Any]:
        data = self.load(key, [])
        if not isinstance(data, list):
            logger.warning("expected a list under %r, got %s; using []", key, type(data).__name__)
            return []
        return data

    def save(self, key: str, value: Any) -> None:
        """Overwrite key with value (pretty-printed JSON, atomic rename)."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        fd, tmp = tempfile.mkstemp(prefix=f'.{key}.', suffix='.tmp', dir=self.data_dir)
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(value, f, indent=4)
            os.replace(tmp, path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
        logger.debug("saved %s -> %s", key, path)
