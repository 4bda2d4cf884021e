"""Trigger matching for expansion and autocomplete.

Every function here is pure: it sees only the snippets, prefix and token it
is given and returns either a snippet, a list of snippets, or ``None``.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Sequence

from blurt.aliases import aliases_for_trigger, strip_prefix
from blurt.constants import DEFAULT_AUTOCOMPLETE_ITEMS

Snippet = Dict[str, Any]

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")


def _trigger(snippet: Snippet) -> str:
    return snippet.get("trigger") or ""


def _limit(max_items: Optional[int]) -> int:
    return max(1, int(max_items or DEFAULT_AUTOCOMPLETE_ITEMS))


def _longest_first(snippets: Sequence[Snippet]) -> List[Snippet]:
    # sorted() is stable, so equal-length duplicates keep collection order.
    return sorted(snippets, key=lambda s: len(_trigger(s)), reverse=True)


def _is_subsequence(query: str, candidate: str) -> bool:
    if not query:
        return False
    remaining = iter(candidate)
    return all(ch in remaining for ch in query)


def match_trigger_pure(word: str, snippets: Sequence[Snippet], prefix: str) -> Optional[Snippet]:
    """Exact, case-sensitive trigger lookup with no alias handling."""
    w = (word or "").strip()
    if not w or not w.startswith(prefix):
        return None
    for snippet in _longest_first(snippets):
        if _trigger(snippet) == w:
            return snippet
    return None


def match_trigger_with_aliases(word: str, snippets: Sequence[Snippet], prefix: str) -> Optional[Snippet]:
    """Resolve a typed token to the snippet it should expand into.

    An exact (case-insensitive) trigger match always wins; among duplicate
    triggers the longest one is preferred. Only when no trigger matches and
    the token carries the prefix are derived aliases consulted, again
    scanning longest triggers first.
    """
    w = (word or "").strip().lower()
    if not w:
        return None
    ordered = _longest_first(snippets)
    for snippet in ordered:
        if _trigger(snippet).lower() == w:
            return snippet
    if not w.startswith(prefix):
        return None
    for snippet in ordered:
        aliases = [a.lower() for a in aliases_for_trigger(_trigger(snippet), prefix)]
        if w in aliases:
            return snippet
    return None


def filter_suggestions(
    term: str, snippets: Sequence[Snippet], prefix: str, max_items: Optional[int]
) -> List[Snippet]:
    q = (term or "").strip()
    if not q or not q.startswith(prefix):
        return []
    q = q.lower()
    matches = [s for s in snippets if _trigger(s).lower().startswith(q)]
    return matches[: _limit(max_items)]


def autocomplete_suggestions(
    term: str, snippets: Sequence[Snippet], prefix: str, max_items: Optional[int]
) -> List[Snippet]:
    """Candidates for the suggestion panel, in collection order.

    A snippet is included when its trigger starts with the term, when one of
    its aliases equals the term, or when the term's letters and digits occur
    in order inside the trigger's letters and digits.
    """
    q = (term or "").strip().lower()
    if not q or not q.startswith(prefix):
        return []
    query_norm = _NON_ALNUM_RE.sub("", q[len(prefix):])

    out: List[Snippet] = []
    for snippet in snippets:
        trigger = _trigger(snippet)
        if trigger.lower().startswith(q):
            out.append(snippet)
            continue
        if q in [a.lower() for a in aliases_for_trigger(trigger, prefix)]:
            out.append(snippet)
            continue
        candidate = _NON_ALNUM_RE.sub("", strip_prefix(trigger, prefix).lower())
        if _is_subsequence(query_norm, candidate):
            out.append(snippet)
    return out[: _limit(max_items)]


def should_show_all_for_query(query: str, prefix: str) -> bool:
    """A bare prefix (or nothing) in a search box lists the whole collection."""
    q = (query or "").strip()
    return not q or q == prefix
