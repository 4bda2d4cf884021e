from __future__ import annotations

import copy
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

import yaml

logger = logging.getLogger(__name__)

ChangeHandler = Callable[[Dict[str, Dict[str, Any]], str], None]


class StorageArea:
    """Key-value area persisted as one YAML document.

    Mirrors the get/set/subscribe contract the stores rely on. Values are
    deep-copied on the way in and out, so callers never share state with the
    persisted snapshot.
    """

    def __init__(self, path: Path, name: str = "local") -> None:
        self.path = Path(path)
        self.name = name
        self._lock = threading.Lock()
        self._handlers: List[ChangeHandler] = []
        self._data: Dict[str, Any] = self._load()

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as exc:
            logger.error("Failed to load storage area %s from %s: %s", self.name, self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring non-mapping storage document in %s", self.path)
            return {}
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        # Persist before swapping in memory so a failed write leaves both untouched.
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            yaml.safe_dump(data, sort_keys=False, allow_unicode=True),
            encoding="utf-8",
        )
        self._data = data

    def get(self, keys: Iterable[str]) -> Dict[str, Any]:
        with self._lock:
            return {k: copy.deepcopy(self._data[k]) for k in keys if k in self._data}

    def get_value(self, key: str, default: Any = None) -> Any:
        return self.get([key]).get(key, default)

    def set(self, items: Dict[str, Any]) -> None:
        changes: Dict[str, Dict[str, Any]] = {}
        with self._lock:
            data = dict(self._data)
            for key, value in items.items():
                changes[key] = {"oldValue": copy.deepcopy(data.get(key)), "newValue": copy.deepcopy(value)}
                data[key] = copy.deepcopy(value)
            self._write(data)
        self._notify(changes)

    def remove(self, key: str) -> None:
        with self._lock:
            if key not in self._data:
                return
            data = dict(self._data)
            old = data.pop(key)
            self._write(data)
        self._notify({key: {"oldValue": old, "newValue": None}})

    def subscribe(self, handler: ChangeHandler) -> Callable[[], None]:
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def _notify(self, changes: Dict[str, Dict[str, Any]]) -> None:
        for handler in list(self._handlers):
            try:
                handler(copy.deepcopy(changes), self.name)
            except Exception:
                logger.exception("Storage change handler failed for area %s", self.name)


class TieredStorage:
    """Local area backed by an optional sync area.

    Reads always come from the local tier; keys the local tier has never
    seen are seeded from the sync tier first.
    """

    def __init__(self, local: StorageArea, sync: Optional[StorageArea] = None) -> None:
        self.local = local
        self.sync = sync

    def ensure_local_from_sync(self, keys: Iterable[str]) -> None:
        keys = list(keys)
        present = self.local.get(keys)
        missing = [k for k in keys if k not in present]
        if not missing or self.sync is None:
            return
        to_copy = self.sync.get(missing)
        if to_copy:
            logger.info("Seeding %s from sync storage", ", ".join(sorted(to_copy)))
            self.local.set(to_copy)

    def get(self, keys: Iterable[str]) -> Dict[str, Any]:
        keys = list(keys)
        self.ensure_local_from_sync(keys)
        return self.local.get(keys)

    def get_value(self, key: str, default: Any = None) -> Any:
        return self.get([key]).get(key, default)

    def set(self, items: Dict[str, Any]) -> None:
        self.local.set(items)

    def remove(self, key: str) -> None:
        self.local.remove(key)

    def subscribe(self, handler: ChangeHandler) -> Callable[[], None]:
        unsubscribers = [self.local.subscribe(handler)]
        if self.sync is not None:
            unsubscribers.append(self.sync.subscribe(handler))

        def unsubscribe() -> None:
            for fn in unsubscribers:
                fn()

        return unsubscribe


def open_storage(base_dir: Path) -> TieredStorage:
    base = Path(base_dir)
    return TieredStorage(StorageArea(base / "local.yml", "local"), StorageArea(base / "sync.yml", "sync"))
