"""Cobalt-inspired colors and constants for the playground views."""

from template_playground.core.types import ResultKind, ViewMode

FONT_SIZE = 13
TAB_SIZE = 2
MONO_FONT = "'Monaco', 'Menlo', 'Ubuntu Mono', 'Consolas', 'source-code-pro', monospace"

EDITOR_BACKGROUND = "#002240"
CONTEXT_EDITOR_BACKGROUND = "rgb(10, 24, 44)"
DIVIDER_COLOR = "#000000"
TEXT_COLOR = "#FFFFFF"

OUTPUT_BACKGROUNDS = {
    ResultKind.SUCCESS: "rgb(41, 74, 119)",
    ResultKind.ENGINE_ERROR: "#590523",
    ResultKind.CONTEXT_ERROR: "#5C3D00",
}

CSS_CLASSES = {
    ResultKind.SUCCESS: "tpg-output-ok",
    ResultKind.ENGINE_ERROR: "tpg-output-error",
    ResultKind.CONTEXT_ERROR: "tpg-output-context-error",
}

VIEW_LABELS = {
    ViewMode.RENDER: "Render",
    ViewMode.TOKENS: "Tokens",
    ViewMode.AST: "AST",
    ViewMode.INSTRUCTIONS: "Instructions",
}

# Token kind → highlight color in the tokens view
TOKEN_COLORS = {
    "data": "#FFFFFF",
    "name": "#FFDD00",
    "string": "#3AD900",
    "integer": "#FF628C",
    "float": "#FF628C",
    "variable_begin": "#FF9D00",
    "variable_end": "#FF9D00",
    "block_begin": "#FF9D00",
    "block_end": "#FF9D00",
}
DEFAULT_TOKEN_COLOR = "#9EFFFF"
