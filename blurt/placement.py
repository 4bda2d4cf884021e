from __future__ import annotations

from typing import Any, Dict, Optional

SAFETY_MARGIN = 8
MAX_ESTIMATED_HEIGHT = 240


def desired_placement_auto(space_below: float, estimated_height: float) -> str:
    return "top" if space_below < estimated_height + SAFETY_MARGIN else "bottom"


def resolve_placement(settings: Dict[str, Any], space_below: float, panel_height: Optional[float] = None) -> str:
    """Pick where the suggestion panel goes relative to the caret.

    A fixed `autocompletePosition` is honoured as-is; `auto` flips above the
    caret when the estimated panel would not fit below it.
    """
    preference = settings.get("autocompletePosition") or "auto"
    if preference in ("top", "bottom"):
        return preference
    estimated = min(MAX_ESTIMATED_HEIGHT, panel_height or MAX_ESTIMATED_HEIGHT)
    return desired_placement_auto(space_below, estimated)
