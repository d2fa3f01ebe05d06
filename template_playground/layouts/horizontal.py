"""Horizontal layout of the editor row: template editor, divider, context editor."""

from typing import Any, Dict, List, Optional

from template_playground.core.settings import SettingsStore
from template_playground.layouts.drag import Axis, DividerController

CONTEXT_WIDTH_KEY = "contextWidth"
DEFAULT_CONTEXT_WIDTH = 350
DIVIDER_THICKNESS = 3


def context_pane_divider(
    store: Optional[SettingsStore] = None,
    default_width: int = DEFAULT_CONTEXT_WIDTH,
    min_size: int = 0,
) -> DividerController:
    """Divider whose horizontal drag controls the context-pane width."""
    return DividerController(
        CONTEXT_WIDTH_KEY,
        Axis.X,
        default_size=default_width,
        store=store,
        min_size=min_size,
    )


def compute_horizontal_layout(context_width: int) -> List[Dict[str, Any]]:
    """Compute flex items for the editor row.

    Returns a list of dicts with keys: id, flex_grow, flex_basis, resizable.
    The template editor takes the remaining space; the context editor is
    anchored to the right edge with a fixed basis.
    """
    return [
        {"id": "template", "flex_grow": 1, "flex_basis": "0px", "resizable": False},
        {
            "id": "divider",
            "flex_grow": 0,
            "flex_basis": f"{DIVIDER_THICKNESS}px",
            "resizable": True,
        },
        {
            "id": "context",
            "flex_grow": 0,
            "flex_basis": f"{max(context_width, 0)}px",
            "resizable": False,
        },
    ]
