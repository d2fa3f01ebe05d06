"""Vertical layout of the playground: editor row above, output pane below."""

from typing import Any, Dict, List, Optional

from template_playground.core.settings import SettingsStore
from template_playground.layouts.drag import Axis, DividerController
from template_playground.layouts.horizontal import DIVIDER_THICKNESS

OUTPUT_HEIGHT_KEY = "outputHeight"
DEFAULT_OUTPUT_HEIGHT = 300


def output_pane_divider(
    store: Optional[SettingsStore] = None,
    default_height: int = DEFAULT_OUTPUT_HEIGHT,
    min_size: int = 0,
) -> DividerController:
    """Divider whose vertical drag controls the output-pane height."""
    return DividerController(
        OUTPUT_HEIGHT_KEY,
        Axis.Y,
        default_size=default_height,
        store=store,
        min_size=min_size,
    )


def compute_vertical_layout(output_height: int, total_height: int = 800) -> List[Dict[str, Any]]:
    """Compute row heights for the playground.

    Returns a list of dicts with keys: id, height, resizable. The output
    pane is anchored to the bottom edge; the editor row gets what is left
    of ``total_height`` but never less than zero.
    """
    output_height = max(output_height, 0)
    editor_height = max(total_height - output_height - DIVIDER_THICKNESS, 0)
    return [
        {"id": "editors", "height": editor_height, "resizable": False},
        {"id": "divider", "height": DIVIDER_THICKNESS, "resizable": True},
        {"id": "output", "height": output_height, "resizable": False},
    ]
