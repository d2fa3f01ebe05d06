"""
Persisted playground settings.

SettingsStore provides namespaced, JSON-encoded key/value access on top of
a durable storage backend, mirroring what the browser side does with
``localStorage``. Reads fall back to a caller-supplied default and writes
never raise: the in-memory state stays authoritative when persistence
fails.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Union

from template_playground.errors import StorageError

logger = logging.getLogger(__name__)

NAMESPACE = "template-playground"


class KeyValueStorage(Protocol):
    """Minimal string key/value storage, modelled on ``window.localStorage``."""

    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """Storage that only lives as long as the process."""

    def __init__(self, items: Optional[Dict[str, str]] = None) -> None:
        self._items: Dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def __len__(self) -> int:
        return len(self._items)


class JsonFileStorage:
    """Storage backed by a single JSON object file on disk.

    Values are kept as strings, exactly like ``localStorage``. The file is
    rewritten through a temporary sibling so a crash mid-write leaves the
    previous contents intact.

    Parameters
    ----------
    path : str or Path
        Location of the JSON file. Parent directories are created on the
        first write.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path).expanduser()

    def _load(self) -> Dict[str, str]:
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            raise StorageError(f"Cannot read settings file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"Settings file {self.path} does not contain an object")
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _dump(self, data: Dict[str, str]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StorageError(f"Cannot write settings file {self.path}: {e}") from e

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._dump(data)


@dataclass(frozen=True)
class PersistResult:
    """Outcome of a settings write. Callers may log it but never raise it."""

    ok: bool
    error: Optional[str] = None


class SettingsStore:
    """Namespaced JSON settings on top of a KeyValueStorage.

    Parameters
    ----------
    storage : KeyValueStorage, optional
        Backend to use. None means storage is unavailable: every read
        returns the fallback and every write reports failure.
    namespace : str
        Prefix applied to every key as ``<namespace>:<key>``.

    Examples
    --------
    >>> store = SettingsStore(MemoryStorage())
    >>> store.set("contextWidth", 420).ok
    True
    >>> store.get("contextWidth", 350)
    420
    """

    def __init__(
        self,
        storage: Optional[KeyValueStorage] = None,
        namespace: str = NAMESPACE,
    ) -> None:
        self._storage = storage
        self.namespace = namespace

    @classmethod
    def from_path(cls, path: Union[str, Path], namespace: str = NAMESPACE) -> "SettingsStore":
        """Create a store persisted to a JSON file."""
        return cls(JsonFileStorage(path), namespace=namespace)

    @property
    def available(self) -> bool:
        return self._storage is not None

    def key_for(self, key: str) -> str:
        """Return the fully namespaced storage key."""
        return f"{self.namespace}:{key}"

    def get(self, key: str, fallback: Any = None) -> Any:
        """Read a setting, returning ``fallback`` on any failure."""
        if self._storage is None:
            return fallback
        try:
            raw = self._storage.get_item(self.key_for(key))
        except Exception as e:
            logger.debug("Settings read failed for %r: %s", key, e)
            return fallback
        if raw is None:
            return fallback
        try:
            return json.loads(raw)
        except ValueError:
            logger.debug("Ignoring undecodable setting %r", key)
            return fallback

    def set(self, key: str, value: Any) -> PersistResult:
        """JSON-encode and write a setting. Failures are reported, not raised."""
        if self._storage is None:
            return PersistResult(ok=False, error="storage unavailable")
        try:
            encoded = json.dumps(value)
            self._storage.set_item(self.key_for(key), encoded)
        except Exception as e:
            logger.debug("Settings write failed for %r: %s", key, e)
            return PersistResult(ok=False, error=str(e))
        return PersistResult(ok=True)

    def remove(self, key: str) -> PersistResult:
        """Delete a setting so that later reads return the fallback."""
        if self._storage is None:
            return PersistResult(ok=False, error="storage unavailable")
        try:
            self._storage.remove_item(self.key_for(key))
        except Exception as e:
            logger.debug("Settings removal failed for %r: %s", key, e)
            return PersistResult(ok=False, error=str(e))
        return PersistResult(ok=True)
