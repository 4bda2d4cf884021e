from __future__ import annotations

from typing import Any, Dict


def normalize_host(value: str) -> str:
    host = (value or "").lower()
    if host.startswith("www."):
        host = host[4:]
    return host


def is_site_enabled_for_settings(host: str, settings: Dict[str, Any]) -> bool:
    """Blocklist always wins; a non-empty allowlist admits only its hosts."""
    h = normalize_host(host)
    allow = [normalize_host(x) for x in settings.get("allowlist") or []]
    block = [normalize_host(x) for x in settings.get("blocklist") or []]
    if h in block:
        return False
    if allow:
        return h in allow
    return True


def is_autocomplete_enabled_on_site(host: str, settings: Dict[str, Any]) -> bool:
    return (
        bool(settings.get("enabled"))
        and bool(settings.get("autocompleteEnabled"))
        and is_site_enabled_for_settings(host, settings)
    )
