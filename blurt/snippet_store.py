from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional

from blurt.constants import STORAGE_KEYS
from blurt.matching import should_show_all_for_query
from blurt.storage import TieredStorage

logger = logging.getLogger(__name__)

SNIPPETS_KEY = STORAGE_KEYS["snippets"]


class SnippetStore:
    """Whole-sequence snippet storage on top of a tiered key-value store.

    Writes always replace the entire list; there is no per-record update.
    Read-modify-write sequences must hold `lock` so concurrent editors do not
    drop each other's changes.
    """

    def __init__(self, storage: TieredStorage) -> None:
        self.storage = storage
        self.lock = threading.RLock()

    def has_snippets(self) -> bool:
        return isinstance(self.storage.get_value(SNIPPETS_KEY), list)

    def list_snippets(self) -> List[Dict[str, Any]]:
        data = self.storage.get_value(SNIPPETS_KEY)
        if data is None:
            return []
        if not isinstance(data, list):
            logger.warning("Stored snippet collection is not a list; treating it as empty")
            return []
        return [s for s in data if isinstance(s, dict)]

    def save_snippets(self, snippets: List[Dict[str, Any]]) -> None:
        self.storage.set({SNIPPETS_KEY: list(snippets)})

    def get_snippet(self, snippet_id: str) -> Optional[Dict[str, Any]]:
        for s in self.list_snippets():
            if s.get("id") == snippet_id:
                return s
        return None

    def search_snippets(self, query: str = "", prefix: str = "/") -> Dict[str, Any]:
        snippets = self.list_snippets()
        if should_show_all_for_query(query, prefix):
            return {"status": "success", "count": len(snippets), "results": snippets}

        q = query.strip().lower()
        results = [
            s
            for s in snippets
            if q in (s.get("trigger") or "").lower() or q in (s.get("description") or "").lower()
        ]
        return {"status": "success", "count": len(results), "results": results}
