from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from blurt.constants import DEFAULT_AUTOCOMPLETE_ITEMS, DEFAULT_PREFIX
from blurt.live_cache import LiveCache
from blurt.matching import autocomplete_suggestions, filter_suggestions, match_trigger_with_aliases
from blurt.settings_store import SETTINGS_KEY
from blurt.sites import is_autocomplete_enabled_on_site, is_site_enabled_for_settings
from blurt.snippet_store import SNIPPETS_KEY

logger = logging.getLogger(__name__)


def word_before_index(text: str, start: int, end: int) -> Tuple[str, Tuple[int, int]]:
    """Token touching the caret: everything back to the previous whitespace."""
    text = text or ""
    s = max(0, min(start, len(text)))
    e = max(0, min(end, len(text)))
    i = s - 1
    while i >= 0 and not text[i].isspace():
        i -= 1
    word_start = i + 1
    return text[word_start:e], (word_start, e)


def should_auto_expand(settings: Dict[str, Any], key: str) -> bool:
    if not settings.get("enabled"):
        return False
    expansion_key = settings.get("expansionKey") or ""
    if not expansion_key:
        return key in (" ", "Enter")
    return key == expansion_key


def compute_next_focus_index(current: int, length: int, shift: bool) -> int:
    if length <= 0:
        return 0
    last = length - 1
    if current < 0 or current >= length:
        return last if shift else 0
    if not shift and current == last:
        return 0
    if shift and current == 0:
        return last
    return current + (-1 if shift else 1)


@dataclass(frozen=True)
class Replacement:
    start: int
    end: int
    text: str


@dataclass(frozen=True)
class KeyOutcome:
    # `handled` tells the caller to suppress the key's default action.
    handled: bool = False
    replacement: Optional[Replacement] = None


class TypingSession:
    """Drives expansion and the suggestion panel for one editable surface.

    The host surface reports keystrokes and input together with the current
    text and caret; the session answers with what to replace, if anything.
    Snippets and settings are read from the `LiveCache` on every event.
    """

    def __init__(self, cache: LiveCache, host: str) -> None:
        self._cache = cache
        self.host = host
        self.suggestions: List[Dict[str, Any]] = []
        self.index = 0
        self.is_open = False
        self._token = ""
        self._remove_listener: Optional[Callable[[], None]] = cache.add_listener(self._on_cache_change)

    @property
    def settings(self) -> Dict[str, Any]:
        return self._cache.settings

    @property
    def prefix(self) -> str:
        return self.settings.get("triggerPrefix") or DEFAULT_PREFIX

    @property
    def limit(self) -> int:
        return max(1, int(self.settings.get("autocompleteMaxItems") or DEFAULT_AUTOCOMPLETE_ITEMS))

    def site_active(self) -> bool:
        return is_site_enabled_for_settings(self.host, self.settings)

    def selected(self) -> Optional[Dict[str, Any]]:
        if not self.is_open or not self.suggestions:
            return None
        return self.suggestions[self.index]

    def close(self) -> None:
        self.is_open = False
        self.suggestions = []
        self.index = 0

    def detach(self) -> None:
        """Stop following cache changes; call when the surface goes away."""
        self.close()
        if self._remove_listener is not None:
            self._remove_listener()
            self._remove_listener = None

    def _show(self, items: List[Dict[str, Any]]) -> None:
        if not items:
            self.close()
            return
        self.suggestions = items[: self.limit]
        self.index = 0
        self.is_open = True

    def on_keypress(self, key: str) -> bool:
        """Typing the prefix opens the panel with the whole collection."""
        if not is_autocomplete_enabled_on_site(self.host, self.settings):
            return False
        if key != self.prefix:
            return False
        self._token = key
        self._show(list(self._cache.snippets))
        return self.is_open

    def on_input(self, text: str, caret: int) -> None:
        if not self.site_active() or not self.is_open:
            return
        token, _ = word_before_index(text, caret, caret)
        q = token.strip()
        self._token = q
        if not q or not q.startswith(self.prefix):
            self.close()
            return
        self._show(autocomplete_suggestions(q, self._cache.snippets, self.prefix, self.limit))

    def on_key(self, text: str, caret: int, key: str) -> KeyOutcome:
        if not self.site_active():
            return KeyOutcome()

        if self.is_open:
            if key == " ":
                self.close()
            elif key in ("ArrowDown", "ArrowUp"):
                count = len(self.suggestions)
                delta = 1 if key == "ArrowDown" else -1
                self.index = (self.index + delta + count) % count
                return KeyOutcome(handled=True)
            elif key in ("Enter", "Tab"):
                return KeyOutcome(handled=True, replacement=self.apply_selected(text, caret))
            elif key == "Escape":
                self.close()
                return KeyOutcome()

        if not should_auto_expand(self.settings, key):
            return KeyOutcome()
        word, (start, end) = word_before_index(text, caret, caret)
        match = match_trigger_with_aliases(word, self._cache.snippets, self.prefix)
        if match is None:
            return KeyOutcome()
        return KeyOutcome(handled=True, replacement=Replacement(start, end, match.get("body") or ""))

    def apply_selected(self, text: str, caret: int) -> Optional[Replacement]:
        chosen = self.selected()
        if chosen is None:
            return None
        _, (start, end) = word_before_index(text, caret, caret)
        self.close()
        return Replacement(start, end, chosen.get("body") or "")

    def refresh(self, token: str) -> None:
        """Re-filter an open panel after the collection changed underneath it."""
        if not self.is_open:
            return
        q = (token or "").strip()
        if not q or not q.startswith(self.prefix):
            self.close()
            return
        self._show(filter_suggestions(q, self._cache.snippets, self.prefix, self.limit))

    def _on_cache_change(self, changed: List[str]) -> None:
        if SETTINGS_KEY in changed and not self.site_active():
            self.close()
        if SNIPPETS_KEY in changed and self.is_open:
            logger.debug("Refreshing open suggestions on %s", self.host)
            self.refresh(self._token)
