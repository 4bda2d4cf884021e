from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

STORAGE_KEYS = {
    "snippets": "blurt_snippets",
    "settings": "blurt_settings",
    "open_target": "blurt_open_target",
}

THEMES = ("dark", "light", "system")
POSITIONS = ("auto", "top", "bottom")

IMPORT_FILENAME = "blurt.snippets.json"

# Shipped as package data next to this module.
UI_HTML_PATH = Path(__file__).with_name("webview_ui") / "blurt.html"

DEFAULT_PREFIX = "/"
DEFAULT_AUTOCOMPLETE_ITEMS = 8
MIN_AUTOCOMPLETE_ITEMS = 1
MAX_AUTOCOMPLETE_ITEMS = 20

# Empty expansionKey means expand on a Space/Enter boundary.
DEFAULT_SETTINGS: Dict[str, Any] = {
    "enabled": True,
    "theme": "dark",
    "triggerPrefix": DEFAULT_PREFIX,
    "expansionKey": "",
    "charLimit": 5000,
    "autocompleteEnabled": True,
    "autocompletePosition": "auto",
    "autocompleteMaxItems": DEFAULT_AUTOCOMPLETE_ITEMS,
    "allowlist": [],
    "blocklist": [],
}


def default_settings() -> Dict[str, Any]:
    """Return a fresh copy of the defaults (lists included)."""
    settings = dict(DEFAULT_SETTINGS)
    settings["allowlist"] = []
    settings["blocklist"] = []
    return settings
