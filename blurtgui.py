"""PyWebView-based Blurt snippet manager."""

from __future__ import annotations

import atexit
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import webview

from blurt.constants import UI_HTML_PATH
from blurt.live_cache import LiveCache
from blurt.matching import autocomplete_suggestions, match_trigger_with_aliases
from blurt.settings_store import SettingsStore
from blurt.sites import is_autocomplete_enabled_on_site, is_site_enabled_for_settings
from blurt.snippet_service import SnippetService
from blurt.snippet_store import SnippetStore
from blurt.storage import open_storage
from blurt.transfer import TransferService

GUI_BACKENDS: Sequence[Optional[str]] = (None, "qt", "gtk")


def _default_base_dir() -> Path:
    override = os.environ.get("BLURT_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".blurt"


class BlurtAPI:
    """Exposes the snippet engine to the JavaScript front end."""

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self._base_dir = Path(base_dir) if base_dir is not None else _default_base_dir()
        self._storage = open_storage(self._base_dir)
        self._snippet_store = SnippetStore(self._storage)
        self._settings_store = SettingsStore(self._storage)
        self._snippet_service = SnippetService(self._snippet_store, self._settings_store)
        self._transfer = TransferService(self._snippet_store, self._settings_store)
        self._snippet_service.seed_defaults()
        self._snippet_service.heal_duplicates()
        self._cache = LiveCache(self._snippet_store, self._settings_store, self._storage)
        self._cache.start()
        self._ready = True
        print(f"[INFO] Blurt ready with {len(self._cache.snippets)} snippets from {self._base_dir}", flush=True)

    def shutdown(self) -> None:
        self._cache.stop()
        print("[INFO] Blurt shutdown complete", flush=True)

    def ping(self) -> Dict[str, Any]:
        """Readiness probe for the frontend bootstrap loop."""
        return {
            "status": "ok",
            "ready": self._ready,
            "snippetCount": len(self._cache.snippets),
            "storagePath": str(self._base_dir),
        }

    def list_snippets(self) -> List[Dict[str, Any]]:
        return list(self._cache.snippets)

    def search_snippets(self, query: str = "") -> Dict[str, Any]:
        return self._snippet_store.search_snippets(query, self._cache.settings.get("triggerPrefix") or "/")

    def save_snippet(
        self, trigger: str, description: str, body: str, snippet_id: Optional[str] = None
    ) -> Dict[str, Any]:
        return self._snippet_service.save_snippet(trigger, description, body, snippet_id)

    def delete_snippet(self, snippet_id: str) -> Dict[str, Any]:
        return self._snippet_service.delete_snippet(snippet_id)

    def reorder_snippets(self, ids: List[str]) -> Dict[str, Any]:
        return self._snippet_service.reorder(ids)

    def overlap_warnings(self) -> List[str]:
        return self._snippet_service.overlap_warnings()

    def get_settings(self) -> Dict[str, Any]:
        return dict(self._cache.settings)

    def save_settings(self, settings: Dict[str, Any]) -> Dict[str, Any]:
        return self._snippet_service.update_settings(settings)

    def suggest(self, term: str) -> List[Dict[str, Any]]:
        settings = self._cache.settings
        return autocomplete_suggestions(
            term, self._cache.snippets, settings.get("triggerPrefix") or "/", settings.get("autocompleteMaxItems")
        )

    def expand(self, word: str) -> Dict[str, Any]:
        """Preview what a typed token would expand into."""
        match = match_trigger_with_aliases(word, self._cache.snippets, self._cache.settings.get("triggerPrefix") or "/")
        if match is None:
            return {"status": "error", "detail": "No matching snippet"}
        return {"status": "success", "snippet": match}

    def site_status(self, host: str) -> Dict[str, Any]:
        settings = self._cache.settings
        return {
            "host": host,
            "enabled": is_site_enabled_for_settings(host, settings),
            "autocomplete": is_autocomplete_enabled_on_site(host, settings),
        }

    def import_file(self, file_path: str) -> Dict[str, Any]:
        return self._transfer.import_file(file_path)

    def export_file(self, directory: str) -> Dict[str, Any]:
        return self._transfer.export_to_file(directory)


def _start_webview(backends: Sequence[Optional[str]] = GUI_BACKENDS) -> None:
    last_error: Optional[Exception] = None
    for preferred in backends:
        label = preferred or "auto"
        try:
            print(f"[DEBUG] Attempting to start PyWebView backend '{label}'", flush=True)
            webview.start(gui=preferred, http_server=False)
            return
        except webview.errors.WebViewException as exc:  # type: ignore[attr-defined]
            last_error = exc
            print(f"[WARNING] GUI backend '{label}' failed: {exc}", flush=True)
    print("[ERROR] PyWebView could not initialize a GUI backend.", flush=True)
    if last_error:
        raise last_error
    raise webview.errors.WebViewException("No GUI backend available")  # type: ignore[attr-defined]


def main() -> None:
    api = BlurtAPI()
    atexit.register(api.shutdown)
    webview.create_window(
        "Blurt",
        html=UI_HTML_PATH.read_text(encoding="utf-8"),
        js_api=api,
        width=1100,
        height=760,
        min_size=(760, 520),
    )
    _start_webview()


if __name__ == "__main__":
    main()
