"""Derived shorthand forms of a trigger.

Aliases are never stored; they are recomputed from the trigger whenever a
match or suggestion needs them.
"""

from __future__ import annotations

import re
from typing import List

_WORD_RE = re.compile(r"[A-Za-z0-9]+")
_TRAILING_DIGITS_RE = re.compile(r"([0-9]+)\s*$")


def strip_prefix(trigger: str, prefix: str) -> str:
    if prefix and trigger.startswith(prefix):
        return trigger[len(prefix):]
    return trigger


def _words(trigger: str, prefix: str) -> List[str]:
    return _WORD_RE.findall(strip_prefix(trigger, prefix))


def acronym_from_trigger(trigger: str, prefix: str) -> str:
    """First letter of every alphanumeric run, lower-cased.

    >>> acronym_from_trigger("/rabbit-holes", "/")
    'rh'
    """
    return "".join(word[0] for word in _words(trigger, prefix)).lower()


def aliases_for_trigger(trigger: str, prefix: str) -> List[str]:
    """Return the alias set of `trigger`, bare and prefixed, without duplicates.

    Order is stable: acronym, prefixed acronym, letter+digits, prefixed
    letter+digits. `/L-Think2` yields ``['lt', '/lt', 'l2', '/l2']``.
    """
    acronym = acronym_from_trigger(trigger, prefix)
    words = _words(trigger, prefix)
    first_letter = words[0][0].lower() if words else ""
    digits = _TRAILING_DIGITS_RE.search(strip_prefix(trigger, prefix))
    digit_suffix = digits.group(1) if digits else ""
    letter_number = f"{first_letter}{digit_suffix}" if first_letter and digit_suffix else ""

    out: List[str] = []
    candidates = []
    if acronym:
        candidates.extend([acronym, f"{prefix}{acronym}"])
    if letter_number:
        candidates.extend([letter_number, f"{prefix}{letter_number}"])
    for alias in candidates:
        if alias not in out:
            out.append(alias)
    return out
