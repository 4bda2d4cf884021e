from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional, Sequence

from blurt.constants import (
    DEFAULT_AUTOCOMPLETE_ITEMS,
    DEFAULT_PREFIX,
    MAX_AUTOCOMPLETE_ITEMS,
    MIN_AUTOCOMPLETE_ITEMS,
    default_settings,
)
from blurt.reconcile import dedupe_by_id, retarget_triggers
from blurt.settings_store import SettingsStore
from blurt.snippet_store import SnippetStore
from blurt.validation import can_save_snippet, detect_overlap_warnings, normalize_trigger

logger = logging.getLogger(__name__)

SEED_SNIPPETS = (
    {
        "trigger": "/sig",
        "description": "Signature",
        "body": "Best regards,\nYour Name",
    },
    {
        "trigger": "/addr",
        "description": "Shipping address",
        "body": "123 Example Street\nSpringfield",
    },
)


def new_snippet_id() -> str:
    return uuid.uuid4().hex


def _split_hosts(value: Any) -> List[str]:
    if isinstance(value, str):
        value = value.splitlines()
    return [str(x).strip() for x in value or [] if str(x).strip()]


class SnippetService:
    """Editing workflows over the snippet and settings stores.

    Every public method returns a status dict; storage failures are logged and
    reported as ``{"status": "error", "detail": ...}`` rather than raised.
    """

    def __init__(self, snippet_store: SnippetStore, settings_store: SettingsStore) -> None:
        self._snippets = snippet_store
        self._settings = settings_store

    def list_snippets(self) -> List[Dict[str, Any]]:
        return self._snippets.list_snippets()

    def get_snippet(self, snippet_id: str) -> Optional[Dict[str, Any]]:
        return self._snippets.get_snippet(snippet_id)

    def overlap_warnings(self) -> List[str]:
        return detect_overlap_warnings(self._snippets.list_snippets())

    def save_snippet(
        self,
        trigger: str,
        description: str,
        body: str,
        snippet_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        prefix = self._settings.get_settings().get("triggerPrefix") or DEFAULT_PREFIX
        if not can_save_snippet(trigger, prefix, description, body):
            return {"status": "error", "detail": "Trigger, description and body are required"}

        trigger = normalize_trigger(trigger, prefix)
        try:
            with self._snippets.lock:
                snippets = self._snippets.list_snippets()
                if snippet_id and any(s.get("id") == snippet_id for s in snippets):
                    saved = {"id": snippet_id, "trigger": trigger, "description": description, "body": body}
                    snippets = [{**s, **saved} if s.get("id") == snippet_id else s for s in snippets]
                    action = "Updated"
                else:
                    saved = {"id": new_snippet_id(), "trigger": trigger, "description": description, "body": body}
                    snippets = [saved] + snippets
                    action = "Created"
                self._snippets.save_snippets(snippets)
        except Exception as exc:
            logger.exception("Failed to save snippet %s", trigger)
            return {"status": "error", "detail": str(exc)}

        return {
            "status": "success",
            "detail": f"{action} {trigger}",
            "snippet": saved,
            "warnings": detect_overlap_warnings(snippets),
        }

    def delete_snippet(self, snippet_id: str) -> Dict[str, Any]:
        try:
            with self._snippets.lock:
                snippets = self._snippets.list_snippets()
                remaining = [s for s in snippets if s.get("id") != snippet_id]
                if len(remaining) == len(snippets):
                    return {"status": "error", "detail": "Snippet not found"}
                self._snippets.save_snippets(remaining)
            return {"status": "success", "detail": f"Deleted {snippet_id}"}
        except Exception as exc:
            logger.exception("Failed to delete snippet %s", snippet_id)
            return {"status": "error", "detail": str(exc)}

    def reorder(self, ids: Sequence[str]) -> Dict[str, Any]:
        """Apply a drag-reorder; ignored unless it covers the whole collection."""
        try:
            with self._snippets.lock:
                snippets = self._snippets.list_snippets()
                by_id = {s.get("id"): s for s in snippets}
                ordered = [by_id[i] for i in ids if i in by_id]
                unchanged = [s.get("id") for s in ordered] == [s.get("id") for s in snippets]
                if len(ordered) != len(snippets) or unchanged:
                    return {"status": "success", "changed": False}
                self._snippets.save_snippets(ordered)
            return {"status": "success", "changed": True}
        except Exception as exc:
            logger.exception("Failed to reorder snippets")
            return {"status": "error", "detail": str(exc)}

    def heal_duplicates(self) -> Dict[str, Any]:
        """Drop records whose id repeats an earlier one.

        Records stored without an id (hand-edited files) get a fresh id first,
        so they are never mistaken for duplicates of each other.
        """
        try:
            with self._snippets.lock:
                snippets = self._snippets.list_snippets()
                missing = sum(1 for s in snippets if not s.get("id"))
                if missing:
                    logger.info("Assigning ids to %d snippet(s) stored without one", missing)
                    snippets = [s if s.get("id") else {**s, "id": new_snippet_id()} for s in snippets]
                healed = dedupe_by_id(snippets)
                removed = len(snippets) - len(healed)
                if removed:
                    logger.info("Removed %d snippet(s) with duplicate ids", removed)
                if missing or removed:
                    self._snippets.save_snippets(healed)
            return {"status": "success", "removed": removed}
        except Exception as exc:
            logger.exception("Failed to heal duplicate snippets")
            return {"status": "error", "detail": str(exc)}

    def change_prefix(self, new_prefix: str) -> Dict[str, Any]:
        new_prefix = new_prefix or DEFAULT_PREFIX
        try:
            with self._snippets.lock:
                old_prefix = self._settings.get_settings().get("triggerPrefix") or DEFAULT_PREFIX
                if old_prefix != new_prefix:
                    snippets = retarget_triggers(self._snippets.list_snippets(), old_prefix, new_prefix)
                    self._snippets.save_snippets(snippets)
                    logger.info("Retargeted %d trigger(s) from %r to %r", len(snippets), old_prefix, new_prefix)
                settings = self._settings.update_settings({"triggerPrefix": new_prefix})
            return {"status": "success", "settings": settings}
        except Exception as exc:
            logger.exception("Failed to change trigger prefix")
            return {"status": "error", "detail": str(exc)}

    def update_settings(self, partial: Dict[str, Any]) -> Dict[str, Any]:
        """Apply a settings-form submission."""
        partial = dict(partial or {})
        if "autocompleteMaxItems" in partial:
            try:
                value = int(partial["autocompleteMaxItems"] or DEFAULT_AUTOCOMPLETE_ITEMS)
            except (TypeError, ValueError):
                value = DEFAULT_AUTOCOMPLETE_ITEMS
            partial["autocompleteMaxItems"] = min(MAX_AUTOCOMPLETE_ITEMS, max(MIN_AUTOCOMPLETE_ITEMS, value))
        for key in ("allowlist", "blocklist"):
            if key in partial:
                partial[key] = _split_hosts(partial[key])

        if "triggerPrefix" in partial:
            result = self.change_prefix(partial.pop("triggerPrefix"))
            if result["status"] != "success":
                return result
        try:
            settings = self._settings.update_settings(partial)
            return {"status": "success", "settings": settings}
        except Exception as exc:
            logger.exception("Failed to save settings")
            return {"status": "error", "detail": str(exc)}

    def seed_defaults(self) -> Dict[str, Any]:
        """First-run seeding; never overwrites anything already stored."""
        seeded: List[str] = []
        try:
            with self._snippets.lock:
                if not self._snippets.has_snippets():
                    self._snippets.save_snippets([{"id": new_snippet_id(), **s} for s in SEED_SNIPPETS])
                    seeded.append("snippets")
            with self._settings.lock:
                if not self._settings.has_settings():
                    self._settings.save_settings(default_settings())
                    seeded.append("settings")
        except Exception as exc:
            logger.exception("Failed to seed defaults")
            return {"status": "error", "detail": str(exc)}
        return {"status": "success", "seeded": seeded}
