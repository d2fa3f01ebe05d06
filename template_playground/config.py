"""
Configuration
=============
Defaults for a playground session, optionally overridden from
``TEMPLATE_PLAYGROUND_*`` environment variables.

Recognised variables:
    TEMPLATE_PLAYGROUND_SETTINGS_PATH   JSON file for persisted settings
                                        ("" disables persistence)
    TEMPLATE_PLAYGROUND_CONTEXT_WIDTH   default context-pane width (px)
    TEMPLATE_PLAYGROUND_OUTPUT_HEIGHT   default output-pane height (px)
    TEMPLATE_PLAYGROUND_MIN_PANE_SIZE   lower clamp for dragged panes (px)
    TEMPLATE_PLAYGROUND_RENDER_MODE     html | text | json
    TEMPLATE_PLAYGROUND_VIEW_MODE       render | tokens | ast | instructions
    TEMPLATE_PLAYGROUND_STRICT          1 to make undefined variables errors
    TEMPLATE_PLAYGROUND_LOG_LEVEL       DEBUG, INFO, ...
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from template_playground.core.settings import NAMESPACE
from template_playground.core.types import RenderMode, ViewMode
from template_playground.layouts.horizontal import DEFAULT_CONTEXT_WIDTH
from template_playground.layouts.vertical import DEFAULT_OUTPUT_HEIGHT
from template_playground.styles.colors import FONT_SIZE, TAB_SIZE

logger = logging.getLogger(__name__)

ENV_PREFIX = "TEMPLATE_PLAYGROUND_"
DEFAULT_SETTINGS_PATH = Path.home() / ".template_playground" / "settings.json"


def _int_value(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(ENV_PREFIX + name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring %s%s=%r: not an integer", ENV_PREFIX, name, raw)
        return default


@dataclass
class PlaygroundConfig:
    """Settings for one playground session.

    Attributes
    ----------
    settings_path : Path, optional
        Where pane sizes are persisted. None keeps them in memory only.
    namespace : str
        Prefix for persisted keys.
    context_width, output_height : int
        Pane sizes used until something is persisted.
    min_pane_size : int
        Lower clamp for dragged pane sizes.
    render_mode, view_mode
        Initial editor modes.
    strict_undefined : bool
        Whether printing an undefined variable is an engine error.
    font_size, tab_size : int
        Editor text metrics.
    log_level : int
        Level for the ``template_playground`` logger.
    """

    settings_path: Optional[Path] = DEFAULT_SETTINGS_PATH
    namespace: str = NAMESPACE
    context_width: int = DEFAULT_CONTEXT_WIDTH
    output_height: int = DEFAULT_OUTPUT_HEIGHT
    min_pane_size: int = 0
    render_mode: RenderMode = RenderMode.HTML
    view_mode: ViewMode = ViewMode.RENDER
    strict_undefined: bool = False
    font_size: int = FONT_SIZE
    tab_size: int = TAB_SIZE
    log_level: int = logging.INFO

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "PlaygroundConfig":
        """Build a config from environment variables; bad values keep defaults."""
        if env is None:
            env = os.environ
        config = cls()

        if ENV_PREFIX + "SETTINGS_PATH" in env:
            raw_path = env[ENV_PREFIX + "SETTINGS_PATH"]
            config.settings_path = Path(raw_path).expanduser() if raw_path else None

        config.context_width = _int_value(env, "CONTEXT_WIDTH", config.context_width)
        config.output_height = _int_value(env, "OUTPUT_HEIGHT", config.output_height)
        config.min_pane_size = max(_int_value(env, "MIN_PANE_SIZE", config.min_pane_size), 0)

        raw_mode = env.get(ENV_PREFIX + "RENDER_MODE")
        if raw_mode:
            try:
                config.render_mode = RenderMode(raw_mode.lower())
            except ValueError:
                logger.warning("Ignoring unknown render mode %r", raw_mode)

        raw_view = env.get(ENV_PREFIX + "VIEW_MODE")
        if raw_view:
            try:
                config.view_mode = ViewMode(raw_view.lower())
            except ValueError:
                logger.warning("Ignoring unknown view mode %r", raw_view)

        raw_strict = env.get(ENV_PREFIX + "STRICT")
        if raw_strict is not None:
            config.strict_undefined = raw_strict.strip().lower() in ("1", "true", "yes", "on")

        raw_level = env.get(ENV_PREFIX + "LOG_LEVEL")
        if raw_level:
            level = logging.getLevelName(raw_level.upper())
            if isinstance(level, int):
                config.log_level = level
            else:
                logger.warning("Ignoring unknown log level %r", raw_level)

        return config
