"""
Key-value persistence backends for the event store.

Every value is a JSON document stored under a fixed key. The store rewrites
all keys after each mutation, so backends only need whole-value get/set.
"""
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from .config import StorageConfig

logger = logging.getLogger(__name__)


class StorageKeys:
    CONFIG = "hackathon_config"
    USERS = "hackathon_users"
    TEAMS = "hackathon_teams"
    SUBMISSIONS = "hackathon_submissions"
    JUDGE_ASSIGNMENTS = "hackathon_judge_assignments"
    SCORES = "hackathon_scores"
    CURRENT_USER = "hackathon_current_user"

    ALL = (CONFIG, USERS, TEAMS, SUBMISSIONS, JUDGE_ASSIGNMENTS, SCORES, CURRENT_USER)


class StorageError(Exception):
    """Raised when a backend cannot write or remove a key."""
    pass


class KeyValueStorage(ABC):
    """String-valued key-value storage."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value or None when the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete a key; deleting an absent key is a no-op."""

    @abstractmethod
    def keys(self) -> List[str]:
        ...

    def load_json(self, key: str, default_factory: Callable[[], Any],
                  parse: Optional[Callable[[Any], Any]] = None) -> Any:
        """Read and decode a key, falling back to ``default_factory()``.

        ``parse`` converts the decoded JSON into the caller's type. Missing keys
        fall back silently; undecodable or invalid values are logged.
        """
        raw = self.get(key)
        if raw is None:
            return default_factory()

        try:
            data = json.loads(raw)
            return parse(data) if parse else data
        except (ValueError, TypeError) as e:
            logger.warning(f"Discarding corrupt value for '{key}': {e}")
            return default_factory()

    def save_json(self, key: str, data: Any) -> None:
        self.set(key, json.dumps(data, ensure_ascii=False))


class InMemoryStorage(KeyValueStorage):
    """Process-local storage; contents are lost at exit."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._data)


class JSONFileStorage(KeyValueStorage):
    """Stores each key as ``<data_dir>/<key>.json``."""

    def __init__(self, data_dir: str):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not read {path}: {e}")
            return None

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            tmp_path.write_text(value, encoding="utf-8")
            tmp_path.replace(path)
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e

    def remove(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to remove {key}: {e}") from e

    def keys(self) -> List[str]:
        return sorted(p.stem for p in self.data_dir.glob("*.json"))


def build_storage(storage_config: StorageConfig) -> KeyValueStorage:
    """Pick a backend from configuration."""
    if storage_config.data_dir:
        logger.info(f"Using JSON file storage in {storage_config.data_dir}")
        return JSONFileStorage(storage_config.data_dir)
    return InMemoryStorage()
