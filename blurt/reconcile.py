"""Deterministic reconciliation of snippet and settings collections."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from blurt.validation import normalize_trigger

Snippet = Dict[str, Any]


@dataclass(frozen=True)
class MergeResult:
    merged: List[Snippet] = field(default_factory=list)
    added: int = 0
    updated: int = 0


def merge_snippets_by_trigger(existing: Sequence[Snippet], incoming: Sequence[Snippet]) -> MergeResult:
    """Merge `incoming` into `existing`, keyed by trigger.

    Duplicate triggers inside `existing` collapse to the last one seen (the
    slot keeps the position of the first). A matching incoming snippet
    overwrites every field it defines, id included, and counts as updated;
    anything else is appended and counts as added.
    """
    by_trigger: Dict[str, Snippet] = {}
    for snippet in existing:
        by_trigger[snippet.get("trigger")] = snippet

    added = 0
    updated = 0
    for snippet in incoming:
        key = snippet.get("trigger")
        current = by_trigger.get(key)
        if current is not None:
            by_trigger[key] = {**current, **snippet}
            updated += 1
        else:
            by_trigger[key] = snippet
            added += 1
    return MergeResult(merged=list(by_trigger.values()), added=added, updated=updated)


def merge_settings_shallow(existing: Dict[str, Any], incoming: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if not incoming:
        return existing
    return {**existing, **incoming}


def retarget_triggers(snippets: Sequence[Snippet], old_prefix: str, new_prefix: str) -> List[Snippet]:
    """Rewrite every trigger onto `new_prefix` after a global prefix change."""
    if old_prefix == new_prefix:
        return list(snippets)
    out: List[Snippet] = []
    for snippet in snippets:
        trigger = snippet.get("trigger") or ""
        if trigger.startswith(old_prefix):
            trigger = new_prefix + trigger[len(old_prefix):]
        elif not trigger.startswith(new_prefix):
            trigger = normalize_trigger(trigger, new_prefix)
        out.append({**snippet, "trigger": trigger})
    return out


def dedupe_by_id(items: Sequence[Snippet]) -> List[Snippet]:
    """Keep the first record for each id, in original order."""
    seen = set()
    out: List[Snippet] = []
    for item in items:
        ident = item.get("id")
        if ident in seen:
            continue
        seen.add(ident)
        out.append(item)
    return out
