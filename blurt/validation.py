from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

Snippet = Dict[str, Any]


def normalize_trigger(raw: str, prefix: str) -> str:
    """Trim and prefix-qualify a trigger; empty input stays empty."""
    t = (raw or "").strip()
    if not t:
        return ""
    if t.startswith(prefix):
        return t
    return f"{prefix}{t}"


def can_save_snippet(trigger: str, prefix: str, description: str, body: str) -> bool:
    has_trigger = len((trigger or "").strip()) > len(prefix or "")
    return has_trigger and bool((description or "").strip()) and bool((body or "").strip())


def count_chars(text: Optional[str]) -> int:
    return len(text) if text else 0


def detect_overlap_warnings(snippets: Sequence[Snippet]) -> List[str]:
    """Report every pair of triggers where one is a string prefix of the other.

    Triggers are sorted first, so a prefix always sorts no later than the
    triggers it prefixes. All pairs are compared, not only neighbours.
    """
    triggers = sorted(s.get("trigger") or "" for s in snippets)
    warnings: List[str] = []
    for i, a in enumerate(triggers):
        for b in triggers[i + 1:]:
            if b.startswith(a):
                warnings.append(f'Trigger overlap: "{a}" is a prefix of "{b}"')
    return warnings
