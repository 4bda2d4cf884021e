from __future__ import annotations

import threading
from typing import Any, Dict, Optional

from blurt.constants import STORAGE_KEYS, default_settings
from blurt.reconcile import merge_settings_shallow
from blurt.storage import TieredStorage

SETTINGS_KEY = STORAGE_KEYS["settings"]
OPEN_TARGET_KEY = STORAGE_KEYS["open_target"]


class SettingsStore:
    """The single Settings record, always read back against the defaults."""

    def __init__(self, storage: TieredStorage) -> None:
        self.storage = storage
        self.lock = threading.RLock()

    def has_settings(self) -> bool:
        return bool(self.storage.get_value(SETTINGS_KEY))

    def get_settings(self) -> Dict[str, Any]:
        stored = self.storage.get_value(SETTINGS_KEY)
        return merge_settings_shallow(default_settings(), stored if isinstance(stored, dict) else None)

    def save_settings(self, settings: Dict[str, Any]) -> None:
        self.storage.set({SETTINGS_KEY: dict(settings)})

    def update_settings(self, partial: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        with self.lock:
            merged = merge_settings_shallow(self.get_settings(), partial)
            self.save_settings(merged)
        return merged

    # Which snippet the editor should open next (set by the quick-search view).
    def get_open_target(self) -> Optional[str]:
        return self.storage.local.get_value(OPEN_TARGET_KEY)

    def set_open_target(self, snippet_id: Optional[str]) -> None:
        if not snippet_id:
            return
        self.storage.local.set({OPEN_TARGET_KEY: str(snippet_id)})

    def clear_open_target(self) -> None:
        self.storage.local.remove(OPEN_TARGET_KEY)
