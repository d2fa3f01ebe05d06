"""Drag-resize protocol for pane dividers.

A divider turns a pointer-down / pointer-move / pointer-up sequence into a
new pane size. Panes are anchored to the far edge of the layout, so moving
the pointer toward that edge shrinks the pane:

    new_size = size_base - (coordinate - mouse_base)

Every size change is written through to the SettingsStore under the
divider's own key. Sizes never change outside an active drag session.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from template_playground.core.settings import SettingsStore

logger = logging.getLogger(__name__)


class Axis(Enum):
    """Pointer coordinate a divider follows."""

    X = "x"  # pageX, resizes a width
    Y = "y"  # pageY, resizes a height


@dataclass(frozen=True)
class DragSession:
    """State captured when a drag gesture starts.

    Attributes
    ----------
    axis : Axis
        Which pointer coordinate is tracked.
    mouse_base : float
        Pointer coordinate at pointer-down.
    size_base : int
        Pane size at pointer-down.
    setting_key : str
        Settings key the resized pane is persisted under.
    """

    axis: Axis
    mouse_base: float
    size_base: int
    setting_key: str

    def size_at(self, coordinate: float, min_size: int = 0) -> int:
        """Pane size for the pointer at ``coordinate``, clamped to ``min_size``."""
        new_size = self.size_base - (coordinate - self.mouse_base)
        return max(int(round(new_size)), min_size)


class DividerController:
    """Owns one pane size and the drag session that may change it.

    Parameters
    ----------
    setting_key : str
        Key under which the size is persisted.
    axis : Axis
        Pointer coordinate this divider follows.
    default_size : int
        Size used when nothing (valid) is persisted yet.
    store : SettingsStore, optional
        Where sizes are read once at construction and written on change.
    min_size : int
        Lower clamp for computed sizes.

    Examples
    --------
    >>> divider = DividerController("contextWidth", Axis.X, default_size=350)
    >>> divider.pointer_down(400)
    >>> divider.pointer_move(380)
    370
    >>> divider.pointer_up()
    """

    def __init__(
        self,
        setting_key: str,
        axis: Axis,
        default_size: int,
        store: Optional[SettingsStore] = None,
        min_size: int = 0,
    ) -> None:
        self.setting_key = setting_key
        self.axis = axis
        self.min_size = max(min_size, 0)
        self._store = store
        self._session: Optional[DragSession] = None
        self._listeners: List[Callable[[int], None]] = []
        self._size = self._load_size(default_size)

    def _load_size(self, default_size: int) -> int:
        if self._store is None:
            return default_size
        stored = self._store.get(self.setting_key, default_size)
        # Non-numeric or non-finite values fall back to the default
        if isinstance(stored, bool) or not isinstance(stored, (int, float)):
            return default_size
        if not math.isfinite(stored):
            return default_size
        return max(int(stored), self.min_size)

    @property
    def size(self) -> int:
        return self._size

    @property
    def dragging(self) -> bool:
        return self._session is not None

    @property
    def session(self) -> Optional[DragSession]:
        return self._session

    @property
    def mouse_base(self) -> float:
        return self._session.mouse_base if self._session else 0

    @property
    def size_base(self) -> int:
        return self._session.size_base if self._session else 0

    def on_resize(self, callback: Callable[[int], None]) -> None:
        """Register a callback invoked with the new size after each change."""
        self._listeners.append(callback)

    def pointer_down(self, coordinate: float) -> None:
        self._session = DragSession(
            axis=self.axis,
            mouse_base=coordinate,
            size_base=self._size,
            setting_key=self.setting_key,
        )

    def pointer_move(self, coordinate: float) -> Optional[int]:
        """Resize while dragging. Returns the new size, or None when idle."""
        if self._session is None:
            return None
        new_size = self._session.size_at(coordinate, self.min_size)
        self._size = new_size
        if self._store is not None:
            result = self._store.set(self.setting_key, new_size)
            if not result.ok:
                logger.debug("Could not persist %s: %s", self.setting_key, result.error)
        for callback in self._listeners:
            callback(new_size)
        return new_size

    def pointer_up(self) -> None:
        self._session = None
