"""Core editor state, engine result types and settings persistence."""

from template_playground.core.settings import (
    JsonFileStorage,
    KeyValueStorage,
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

__all__ = [
    "ASTNode",
    "EngineResult",
    "Instruction",
    "RenderMode",
    "ResultKind",
    "Span",
    "Token",
    "ViewMode",
    "JsonFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "PersistResult",
    "SettingsStore",
]
