"""Import/export of the snippet and settings collections.

Imports accept two payload conventions, the canonical ``snippets`` /
``settings`` keys and the storage-key names (``blurt_snippets`` /
``blurt_settings``). Both are normalized here, at the boundary, before the
reconciliation functions see anything.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from blurt.constants import (
    IMPORT_FILENAME,
    MAX_AUTOCOMPLETE_ITEMS,
    MIN_AUTOCOMPLETE_ITEMS,
    POSITIONS,
    STORAGE_KEYS,
    THEMES,
)
from blurt.reconcile import merge_settings_shallow, merge_snippets_by_trigger
from blurt.settings_store import SettingsStore
from blurt.snippet_service import new_snippet_id
from blurt.snippet_store import SnippetStore
from blurt.validation import detect_overlap_warnings

logger = logging.getLogger(__name__)

SNIPPET_FIELDS = ("id", "trigger", "description", "body")
KNOWN_PAYLOAD_KEYS = {"snippets", "settings", STORAGE_KEYS["snippets"], STORAGE_KEYS["settings"]}


@dataclass(frozen=True)
class ImportPayload:
    snippets: Optional[List[Dict[str, Any]]] = None
    settings: Optional[Dict[str, Any]] = None


def is_valid_import_filename(name: str) -> bool:
    return Path(name or "").name == IMPORT_FILENAME


def coerce_snippet(raw: Any) -> Optional[Dict[str, Any]]:
    """Canonical snippet from an imported record, or ``None`` if it has no trigger.

    Fields with the wrong type are left out so a merge keeps the existing
    record's value for them.
    """
    if not isinstance(raw, dict):
        return None
    trigger = raw.get("trigger")
    if not isinstance(trigger, str) or not trigger.strip():
        return None
    snippet: Dict[str, Any] = {}
    for key in SNIPPET_FIELDS:
        value = raw.get(key)
        if isinstance(value, str):
            snippet[key] = value
    if not snippet.get("id", "").strip():
        snippet.pop("id", None)
    return snippet


def _string_list(value: Any) -> Optional[List[str]]:
    if not isinstance(value, list):
        return None
    return [x.strip() for x in value if isinstance(x, str) and x.strip()]


def coerce_settings(raw: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(raw, dict):
        return None
    out: Dict[str, Any] = {}
    for key, value in raw.items():
        if key in ("enabled", "autocompleteEnabled"):
            if isinstance(value, bool):
                out[key] = value
        elif key == "theme":
            if value in THEMES:
                out[key] = value
        elif key == "autocompletePosition":
            if value in POSITIONS:
                out[key] = value
        elif key == "triggerPrefix":
            if isinstance(value, str) and value.strip():
                out[key] = value.strip()
        elif key == "expansionKey":
            if isinstance(value, str):
                out[key] = value
        elif key == "charLimit":
            if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
                out[key] = value
        elif key == "autocompleteMaxItems":
            if isinstance(value, int) and not isinstance(value, bool):
                out[key] = min(MAX_AUTOCOMPLETE_ITEMS, max(MIN_AUTOCOMPLETE_ITEMS, value))
        elif key in ("allowlist", "blocklist"):
            hosts = _string_list(value)
            if hosts is not None:
                out[key] = hosts
        else:
            logger.warning("Ignoring unknown settings key %r in import", key)
    return out


def normalize_import_payload(payload: Any) -> ImportPayload:
    if not isinstance(payload, dict):
        return ImportPayload()
    unknown = sorted(set(payload) - KNOWN_PAYLOAD_KEYS)
    if unknown:
        logger.warning("Ignoring unknown import keys: %s", ", ".join(map(str, unknown)))

    raw_snippets = payload.get("snippets")
    if not isinstance(raw_snippets, list):
        raw_snippets = payload.get(STORAGE_KEYS["snippets"])
    snippets = None
    if isinstance(raw_snippets, list):
        snippets = [s for s in (coerce_snippet(r) for r in raw_snippets) if s is not None]
        skipped = len(raw_snippets) - len(snippets)
        if skipped:
            logger.warning("Skipped %d imported snippet(s) without a trigger", skipped)

    raw_settings = payload.get("settings")
    if raw_settings is None:
        raw_settings = payload.get(STORAGE_KEYS["settings"])
    return ImportPayload(snippets=snippets, settings=coerce_settings(raw_settings))


class TransferService:
    def __init__(self, snippet_store: SnippetStore, settings_store: SettingsStore) -> None:
        self._snippets = snippet_store
        self._settings = settings_store

    def export_payload(self) -> Dict[str, Any]:
        return {"snippets": self._snippets.list_snippets(), "settings": self._settings.get_settings()}

    def export_to_file(self, directory: str) -> Dict[str, Any]:
        target = Path(directory) / IMPORT_FILENAME
        try:
            payload = self.export_payload()
            target.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
            return {"status": "success", "detail": f"Exported {len(payload['snippets'])} snippets", "path": str(target)}
        except Exception as exc:
            logger.exception("Export to %s failed", target)
            return {"status": "error", "detail": str(exc)}

    def import_payload(self, payload: Any) -> Dict[str, Any]:
        """Add new snippets, update existing ones by trigger, overwrite given settings keys."""
        incoming = normalize_import_payload(payload)
        added = 0
        updated = 0
        try:
            if incoming.snippets is not None:
                with self._snippets.lock:
                    result = merge_snippets_by_trigger(self._snippets.list_snippets(), incoming.snippets)
                    merged = [s if s.get("id") else {**s, "id": new_snippet_id()} for s in result.merged]
                    self._snippets.save_snippets(merged)
                added, updated = result.added, result.updated
            if incoming.settings is not None:
                with self._settings.lock:
                    current = self._settings.get_settings()
                    self._settings.save_settings(merge_settings_shallow(current, incoming.settings))
        except Exception as exc:
            logger.exception("Import failed")
            return {"status": "error", "detail": str(exc)}

        logger.info("Imported snippets (added %d, updated %d)", added, updated)
        return {
            "status": "success",
            "detail": f"Imported (added {added}, updated {updated})",
            "added": added,
            "updated": updated,
            "warnings": detect_overlap_warnings(self._snippets.list_snippets()),
        }

    def import_file(self, file_path: str, confirm: Optional[Callable[[], bool]] = None) -> Dict[str, Any]:
        path = Path(file_path)
        if not is_valid_import_filename(path.name):
            return {"status": "error", "detail": f'Import file must be named exactly "{IMPORT_FILENAME}"'}
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {"status": "error", "detail": "File not found"}
        except (OSError, ValueError) as exc:
            logger.warning("Could not parse import file %s: %s", path, exc)
            return {"status": "error", "detail": "Invalid JSON"}
        if confirm is not None and not confirm():
            return {"status": "cancelled", "detail": "Import cancelled"}
        return self.import_payload(payload)
