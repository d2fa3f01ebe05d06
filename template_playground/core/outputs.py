"""Output views: the four engine pipelines and the dispatcher that picks one."""

import html
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

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
from template_playground.engines.base_engine import EngineAdapter
from template_playground.errors import ContextParseError, EngineError
from template_playground.styles.colors import (
    CSS_CLASSES,
    DEFAULT_TOKEN_COLOR,
    TOKEN_COLORS,
)

logger = logging.getLogger(__name__)


def parse_context(text: str) -> Any:
    """Parse the JSON evaluation context.

    Raises
    ------
    ContextParseError
        If ``text`` is not valid JSON.
    """
    try:
        return json.loads(text)
    except (ValueError, RecursionError) as e:
        raise ContextParseError(f"Invalid JSON context: {e}") from e


def _json_text(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def format_ast(node: ASTNode) -> str:
    """Render a syntax tree as an indented outline."""
    lines: List[str] = []
    _format_node(node, 0, lines)
    return "\n".join(lines)


def _format_node(node: ASTNode, depth: int, lines: List[str]) -> None:
    pad = "  " * depth
    lines.append(f"{pad}{node.kind} @{node.lineno}")
    for name, value in node.fields.items():
        if isinstance(value, ASTNode):
            lines.append(f"{pad}  {name}:")
            _format_node(value, depth + 2, lines)
        elif isinstance(value, list) and any(isinstance(v, ASTNode) for v in value):
            lines.append(f"{pad}  {name}:")
            for item in value:
                if isinstance(item, ASTNode):
                    _format_node(item, depth + 2, lines)
                else:
                    lines.append(f"{pad}    {_json_text(item)}")
        else:
            lines.append(f"{pad}  {name}: {_json_text(value)}")


class OutputRenderer(ABC):
    """One output pipeline. Runs the engine and isolates its own failures."""

    mode: ViewMode
    uses_context: bool = False

    def execute(
        self,
        engine: EngineAdapter,
        template: str,
        context_text: str,
        render_mode: RenderMode,
    ) -> EngineResult:
        """Run the pipeline, turning every failure into an error result."""
        try:
            payload = self.run(engine, template, context_text, render_mode)
        except ContextParseError as e:
            return EngineResult.context_error(str(e))
        except EngineError as e:
            return EngineResult.engine_error(str(e))
        except Exception as e:
            # Adapters should only raise EngineError
            logger.exception("Unexpected failure in %s view", self.mode.value)
            return EngineResult.engine_error(f"{type(e).__name__}: {e}")
        return EngineResult.success(payload)

    @abstractmethod
    def run(
        self,
        engine: EngineAdapter,
        template: str,
        context_text: str,
        render_mode: RenderMode,
    ) -> Any: ...

    @abstractmethod
    def payload_html(self, payload: Any) -> str: ...

    @abstractmethod
    def payload_text(self, payload: Any) -> str: ...

    def to_html(self, result: EngineResult) -> str:
        """HTML fragment for the output pane, styled by result kind."""
        css_cls = CSS_CLASSES[result.kind]
        if result.ok:
            body = self.payload_html(result.payload)
        else:
            body = html.escape(result.message)
        return (
            f'<div class="tpg-output {css_cls}" data-view="{self.mode.value}" '
            f'data-result="{result.kind.value}">{body}</div>'
        )

    def to_text(self, result: EngineResult) -> str:
        if result.ok:
            return self.payload_text(result.payload)
        return result.message


class RenderOutput(OutputRenderer):
    """Renders the template with the parsed context."""

    mode = ViewMode.RENDER
    uses_context = True

    def run(self, engine, template, context_text, render_mode):
        context = parse_context(context_text)
        name = render_mode.template_name
        env = engine.create_environment({name: template})
        return env.render(name, context)

    def payload_html(self, payload: str) -> str:
        return f'<pre class="tpg-pre">{html.escape(payload)}</pre>'

    def payload_text(self, payload: str) -> str:
        return payload


class TokensOutput(OutputRenderer):
    """Lists lexer tokens with their source spans."""

    mode = ViewMode.TOKENS

    def run(self, engine, template, context_text, render_mode):
        return engine.tokenize(template)

    def payload_html(self, payload: List[Tuple[Token, Span]]) -> str:
        rows = []
        for token, span in payload:
            color = TOKEN_COLORS.get(token.name, DEFAULT_TOKEN_COLOR)
            value = "" if token.payload is None else html.escape(_json_text(token.payload))
            rows.append(
                f"<tr>"
                f'<td class="tpg-span">{span}</td>'
                f'<td class="tpg-token" style="color:{color};">{html.escape(token.name)}</td>'
                f'<td class="tpg-payload">{value}</td>'
                f"</tr>"
            )
        return (
            '<table class="tpg-table"><tr><th>Span</th><th>Token</th><th>Value</th></tr>'
            f'{"".join(rows)}</table>'
        )

    def payload_text(self, payload: List[Tuple[Token, Span]]) -> str:
        lines = []
        for token, span in payload:
            line = f"{str(span):<16} {token.name}"
            if token.payload is not None:
                line += f" {_json_text(token.payload)}"
            lines.append(line)
        return "\n".join(lines)


class AstOutput(OutputRenderer):
    """Shows the parsed syntax tree."""

    mode = ViewMode.AST

    def run(self, engine, template, context_text, render_mode):
        return engine.parse(template)

    def payload_html(self, payload: ASTNode) -> str:
        return f'<pre class="tpg-pre">{html.escape(format_ast(payload))}</pre>'

    def payload_text(self, payload: ASTNode) -> str:
        return format_ast(payload)


class InstructionsOutput(OutputRenderer):
    """Shows compiled instructions per block, blocks sorted by name."""

    mode = ViewMode.INSTRUCTIONS

    def run(self, engine, template, context_text, render_mode):
        programs = engine.instructions(template)
        return dict(sorted(programs.items()))

    def payload_html(self, payload: Dict[str, List[Instruction]]) -> str:
        parts = []
        for block, instructions in payload.items():
            rows = []
            for idx, instr in enumerate(instructions):
                arg = "" if instr.arg is None else html.escape(_json_text(instr.arg))
                rows.append(
                    f"<tr><td>{idx:>4}</td>"
                    f'<td class="tpg-op">{html.escape(instr.op)}</td>'
                    f'<td class="tpg-payload">{arg}</td></tr>'
                )
            parts.append(
                f'<div class="tpg-block" data-block="{html.escape(block)}">'
                f'<div class="tpg-block-title">{html.escape(block)}</div>'
                f'<table class="tpg-table"><tr><th>#</th><th>Op</th><th>Arg</th></tr>'
                f'{"".join(rows)}</table>'
                f"</div>"
            )
        return "\n".join(parts)

    def payload_text(self, payload: Dict[str, List[Instruction]]) -> str:
        lines = []
        for block, instructions in payload.items():
            lines.append(f"{block}:")
            for idx, instr in enumerate(instructions):
                line = f"  {idx:>4} {instr.op}"
                if instr.arg is not None:
                    line += f" {_json_text(instr.arg)}"
                lines.append(line)
        return "\n".join(lines)


class OutputDispatcher:
    """Selects one of the four output renderers and runs it on demand.

    Parameters
    ----------
    engine : EngineAdapter
        The engine every renderer invokes.
    mode : ViewMode
        Initially selected view.

    Examples
    --------
    >>> dispatcher = OutputDispatcher(JinjaEngine())
    >>> dispatcher.select(ViewMode.TOKENS)
    >>> result = dispatcher.dispatch("{{ x }}", "{}", RenderMode.TEXT)
    >>> result.ok
    True
    """

    def __init__(self, engine: EngineAdapter, mode: ViewMode = ViewMode.RENDER) -> None:
        self.engine = engine
        self.renderers: Dict[ViewMode, OutputRenderer] = {
            r.mode: r for r in (RenderOutput(), TokensOutput(), AstOutput(), InstructionsOutput())
        }
        self._mode = mode

    @property
    def mode(self) -> ViewMode:
        return self._mode

    @property
    def renderer(self) -> OutputRenderer:
        return self.renderers[self._mode]

    def select(self, mode: ViewMode) -> None:
        """Switch the active view. Only explicit selection changes it."""
        self._mode = ViewMode(mode)

    def dispatch(
        self,
        template: str,
        context_text: str,
        render_mode: RenderMode,
        mode: Optional[ViewMode] = None,
    ) -> EngineResult:
        """Run the active (or given) view against the current editor state."""
        renderer = self.renderers[ViewMode(mode) if mode is not None else self._mode]
        result = renderer.execute(self.engine, template, context_text, render_mode)
        if result.kind is not ResultKind.SUCCESS:
            logger.debug("%s view failed: %s", renderer.mode.value, result.message)
        return result
