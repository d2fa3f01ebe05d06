"""Jinja2 engine adapter: environments, lexer tokens, syntax trees and bytecode."""

import bisect
import dis
import json
import logging
import traceback
from types import CodeType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from jinja2 import DictLoader, Environment, StrictUndefined, Undefined, nodes, pass_context
from jinja2.exceptions import TemplateError
from jinja2.lexer import ignored_tokens

from template_playground.core.types import (
    ASTNode,
    Instruction,
    Span,
    Token,
    to_json_value,
)
from template_playground.engines.base_engine import EngineAdapter, TemplateEnvironment
from template_playground.errors import EngineError

logger = logging.getLogger(__name__)

# File extensions that select an auto-escape strategy
HTML_EXTENSIONS = (".html", ".htm", ".xml")
JSON_EXTENSIONS = (".json",)

ROOT_BLOCK = "<root>"
SOURCE_NAME = "<string>"

# Token kinds whose value is meaningful to show next to the kind
PAYLOAD_TOKENS = frozenset(["data", "name", "string", "integer", "float"])


def _autoescape(name: Optional[str]) -> bool:
    return name is not None and name.endswith(HTML_EXTENSIONS)


@pass_context
def _finalize(context: Any, value: Any) -> Any:
    """JSON-serialize printed values for templates registered as ``.json``."""
    name = context.name or ""
    if not name.endswith(JSON_EXTENSIONS) or isinstance(value, Undefined):
        return value
    return json.dumps(to_json_value(value), ensure_ascii=False)


def _template_lineno(exc: BaseException) -> Optional[int]:
    """Best-effort template line of a runtime error from the rewritten traceback."""
    lineno = getattr(exc, "lineno", None)
    if lineno:
        return lineno
    frames = traceback.extract_tb(exc.__traceback__)
    for frame in reversed(frames):
        if frame.filename == "<template>":
            return frame.lineno
    return None


def annotate_error(
    exc: BaseException,
    name: Optional[str] = None,
    source: Optional[str] = None,
) -> EngineError:
    """Build an EngineError with the template location and offending line."""
    message = getattr(exc, "message", None) or str(exc) or type(exc).__name__
    name = getattr(exc, "name", None) or name or SOURCE_NAME
    lineno = _template_lineno(exc)

    text = f"{type(exc).__name__}: {message}"
    if lineno:
        text += f" (in {name}:{lineno})"
        if source is not None:
            lines = source.splitlines()
            if 0 < lineno <= len(lines):
                text += f"\n\n{lineno:>4} > {lines[lineno - 1]}"
    else:
        text += f" (in {name})"
    return EngineError(text)


def _normalize_newlines(source: str) -> str:
    return source.replace("\r\n", "\n").replace("\r", "\n")


class _PositionIndex:
    """Maps character offsets to 1-based (line, column) pairs."""

    def __init__(self, source: str) -> None:
        self._line_starts = [0]
        for idx, char in enumerate(source):
            if char == "\n":
                self._line_starts.append(idx + 1)

    def position(self, offset: int) -> Tuple[int, int]:
        line = bisect.bisect_right(self._line_starts, offset)
        return line, offset - self._line_starts[line - 1] + 1

    def span(self, start: int, end: int) -> Span:
        start_line, start_col = self.position(start)
        end_line, end_col = self.position(end)
        return Span(start_line, start_col, end_line, end_col)


def _convert_node(node: nodes.Node) -> ASTNode:
    fields = {name: _convert_field(getattr(node, name, None)) for name in node.fields}
    return ASTNode(
        kind=type(node).__name__,
        lineno=getattr(node, "lineno", None) or 0,
        fields=fields,
    )


def _convert_field(value: Any) -> Any:
    if isinstance(value, nodes.Node):
        return _convert_node(value)
    if isinstance(value, (list, tuple)) and any(isinstance(v, nodes.Node) for v in value):
        return [_convert_field(v) for v in value]
    return to_json_value(value)


def _convert_code(code: CodeType) -> List[Instruction]:
    result = []
    for instr in dis.get_instructions(code):
        if instr.arg is None:
            arg = None
        elif isinstance(instr.argval, CodeType):
            arg = f"<code {instr.argval.co_name}>"
        else:
            arg = to_json_value(instr.argval)
        result.append(Instruction(op=instr.opname, arg=arg))
    return result


class JinjaEnvironment(TemplateEnvironment):
    """A Jinja2 environment whose templates were all compiled up front."""

    def __init__(self, environment: Environment, sources: Dict[str, str]) -> None:
        self._environment = environment
        self._sources = sources

    @property
    def names(self) -> List[str]:
        return sorted(self._sources)

    def render(self, name: str, context: Any) -> str:
        if not isinstance(context, dict):
            raise EngineError(
                f"TypeError: template context must be a JSON object, "
                f"got {type(context).__name__} (in {name})"
            )
        try:
            template = self._environment.get_template(name)
            return template.render(context)
        except Exception as e:
            logger.debug("Rendering %s failed: %s", name, e)
            raise annotate_error(e, name=name, source=self._sources.get(name)) from e


class JinjaEngine(EngineAdapter):
    """EngineAdapter for Jinja2.

    Parameters
    ----------
    strict_undefined : bool
        Use ``StrictUndefined`` so that printing an undefined variable is an
        error. By default undefined variables render as empty strings and
        only attribute access on them fails.

    Examples
    --------
    >>> engine = JinjaEngine()
    >>> env = engine.create_environment({"template.txt": "Hello {{ name }}!"})
    >>> env.render("template.txt", {"name": "World"})
    'Hello World!'
    """

    name = "jinja2"

    def __init__(self, strict_undefined: bool = False) -> None:
        self.strict_undefined = strict_undefined
        # Shared environment for source-only queries (no autoescape, no loader)
        self._machinery = Environment(undefined=self._undefined)

    @property
    def _undefined(self) -> type:
        return StrictUndefined if self.strict_undefined else Undefined

    def create_environment(self, files: Mapping[str, str]) -> JinjaEnvironment:
        sources = dict(files)
        environment = Environment(
            loader=DictLoader(sources),
            autoescape=_autoescape,
            finalize=_finalize,
            undefined=self._undefined,
        )
        for name in sources:
            try:
                environment.get_template(name)
            except TemplateError as e:
                logger.debug("Compiling %s failed: %s", name, e)
                raise annotate_error(e, name=name, source=sources[name]) from e
        return JinjaEnvironment(environment, sources)

    def tokenize(self, source: str) -> List[Tuple[Token, Span]]:
        lexer = self._machinery.lexer
        normalized = _normalize_newlines(source)
        index = _PositionIndex(normalized)
        result: List[Tuple[Token, Span]] = []
        cursor = 0
        try:
            for lineno, kind, value_str in lexer.tokeniter(source, SOURCE_NAME):
                start = normalized.find(value_str, cursor) if value_str else cursor
                if start < 0:
                    start = cursor
                end = start + len(value_str)
                cursor = end
                if kind in ignored_tokens:
                    continue
                for tok in lexer.wrap([(lineno, kind, value_str)], SOURCE_NAME):
                    payload = to_json_value(tok.value) if tok.type in PAYLOAD_TOKENS else None
                    result.append((Token(tok.type, payload), index.span(start, end)))
        except TemplateError as e:
            raise annotate_error(e, source=source) from e
        return result

    def parse(self, source: str) -> ASTNode:
        try:
            tree = self._machinery.parse(source, name=SOURCE_NAME)
        except TemplateError as e:
            raise annotate_error(e, source=source) from e
        return _convert_node(tree)

    def instructions(self, source: str) -> Dict[str, List[Instruction]]:
        try:
            module = self._machinery.compile(source, name=SOURCE_NAME)
        except (TemplateError, SyntaxError) as e:
            raise annotate_error(e, source=source) from e

        programs: Dict[str, List[Instruction]] = {}
        for const in module.co_consts:
            if not isinstance(const, CodeType):
                continue
            if const.co_name == "root":
                programs[ROOT_BLOCK] = _convert_code(const)
            elif const.co_name.startswith("block_"):
                programs[const.co_name[len("block_"):]] = _convert_code(const)
        return dict(sorted(programs.items()))
