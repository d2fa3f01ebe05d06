"""PaneLayout: the two resizable dividers of the playground."""

from typing import Optional

from template_playground.core.settings import SettingsStore
from template_playground.layouts.drag import DividerController
from template_playground.layouts.horizontal import (
    DEFAULT_CONTEXT_WIDTH,
    context_pane_divider,
)
from template_playground.layouts.vertical import (
    DEFAULT_OUTPUT_HEIGHT,
    output_pane_divider,
)


class PaneLayout:
    """Layout metrics owned by their divider controllers.

    Sizes are seeded from the SettingsStore once, here, and afterwards only
    change through drag gestures on the individual dividers.

    Parameters
    ----------
    store : SettingsStore, optional
        Persistence for both sizes.
    context_width : int
        Default context-pane width in pixels.
    output_height : int
        Default output-pane height in pixels.
    min_size : int
        Lower clamp applied to both dividers.
    """

    def __init__(
        self,
        store: Optional[SettingsStore] = None,
        context_width: int = DEFAULT_CONTEXT_WIDTH,
        output_height: int = DEFAULT_OUTPUT_HEIGHT,
        min_size: int = 0,
    ) -> None:
        self.context_divider: DividerController = context_pane_divider(
            store, default_width=context_width, min_size=min_size
        )
        self.output_divider: DividerController = output_pane_divider(
            store, default_height=output_height, min_size=min_size
        )

    @property
    def context_width(self) -> int:
        return self.context_divider.size

    @property
    def output_height(self) -> int:
        return self.output_divider.size

    @property
    def dragging(self) -> bool:
        return self.context_divider.dragging or self.output_divider.dragging

    def release_all(self) -> None:
        """End any drag in progress, e.g. when the pointer leaves the page."""
        self.context_divider.pointer_up()
        self.output_divider.pointer_up()
