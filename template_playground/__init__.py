"""
Template Playground: Edit a template and a JSON context side by side and inspect
what the template engine makes of them in Jupyter notebooks.
"""

__version__ = "0.1.0"

from template_playground.config import PlaygroundConfig
from template_playground.core.outputs import OutputDispatcher
from template_playground.core.playground import Playground
from template_playground.core.settings import (
    JsonFileStorage,
    MemoryStorage,
    PersistResult,
    SettingsStore,
)
from template_playground.core.types import (
    ASTNode,
    EngineResult,
    Instruction,
    RenderMode,
    ResultKind,
    Span,
    Token,
    ViewMode,
)
from template_playground.engines.jinja_engine import JinjaEngine
from template_playground.errors import (
    ContextParseError,
    EngineError,
    PlaygroundError,
    StorageError,
)
from template_playground.layouts.drag import Axis, DividerController, DragSession
from template_playground.layouts.panes import PaneLayout
from template_playground.logging_config import setup_logging


def playground(template=None, template_context=None, **kwargs):  # type: ignore[no-untyped-def]
    """Convenience function to create a Playground configured from the environment."""
    config = kwargs.pop("config", None) or PlaygroundConfig.from_env()
    setup_logging(config.log_level)
    return Playground(template, template_context, config=config, **kwargs)


__all__ = [
    "ASTNode",
    "Axis",
    "ContextParseError",
    "DividerController",
    "DragSession",
    "EngineError",
    "EngineResult",
    "Instruction",
    "JinjaEngine",
    "JsonFileStorage",
    "MemoryStorage",
    "OutputDispatcher",
    "PaneLayout",
    "PersistResult",
    "Playground",
    "PlaygroundConfig",
    "PlaygroundError",
    "RenderMode",
    "ResultKind",
    "SettingsStore",
    "Span",
    "StorageError",
    "Token",
    "ViewMode",
    "playground",
    "setup_logging",
    "__version__",
]
