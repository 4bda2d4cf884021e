from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from blurt.constants import default_settings
from blurt.reconcile import merge_settings_shallow
from blurt.settings_store import SETTINGS_KEY, SettingsStore
from blurt.snippet_store import SNIPPETS_KEY, SnippetStore

logger = logging.getLogger(__name__)


class LiveCache:
    """In-memory snapshots of snippets and settings kept fresh by storage events.

    Owned by the calling layer. The matching functions never read it
    directly; callers pass `cache.snippets` / `cache.settings` as arguments.
    """

    def __init__(self, snippet_store: SnippetStore, settings_store: SettingsStore, storage: Any) -> None:
        self._snippet_store = snippet_store
        self._settings_store = settings_store
        self._storage = storage
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._listeners: List[Callable[[List[str]], None]] = []
        self.snippets: List[Dict[str, Any]] = []
        self.settings: Dict[str, Any] = default_settings()

    def start(self) -> None:
        if self._unsubscribe is not None:
            return
        self.refresh()
        self._unsubscribe = self._storage.subscribe(self._on_change)

    def stop(self) -> None:
        if self._unsubscribe is None:
            return
        self._unsubscribe()
        self._unsubscribe = None

    def is_running(self) -> bool:
        return self._unsubscribe is not None

    def refresh(self) -> None:
        self.snippets = self._snippet_store.list_snippets()
        self.settings = self._settings_store.get_settings()

    def add_listener(self, callback: Callable[[List[str]], None]) -> Callable[[], None]:
        """Register `callback`; the returned function removes it again."""
        self._listeners.append(callback)

        def remove() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return remove

    def listener_count(self) -> int:
        return len(self._listeners)

    def _on_change(self, changes: Dict[str, Dict[str, Any]], area: str) -> None:
        changed: List[str] = []
        if SETTINGS_KEY in changes:
            new_value = changes[SETTINGS_KEY].get("newValue")
            if isinstance(new_value, dict):
                self.settings = merge_settings_shallow(default_settings(), new_value)
                changed.append(SETTINGS_KEY)
        if SNIPPETS_KEY in changes:
            new_value = changes[SNIPPETS_KEY].get("newValue")
            if isinstance(new_value, list):
                self.snippets = new_value
                changed.append(SNIPPETS_KEY)
        if not changed:
            return
        logger.debug("Cache refreshed from %s storage: %s", area, ", ".join(changed))
        for callback in list(self._listeners):
            try:
                callback(changed)
            except Exception:
                logger.exception("Cache listener failed")
