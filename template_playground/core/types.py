"""
Data structures for the template playground.

These dataclasses describe the editor modes and the values that come
back from a template engine: tokens with their source spans, syntax
trees, compiled instructions and the per-invocation result wrapper.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

JSONValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]


class RenderMode(Enum):
    """How the template is interpreted (selects the synthetic file name)."""

    HTML = "html"
    TEXT = "text"
    JSON = "json"

    @property
    def extension(self) -> str:
        return {"html": "html", "text": "txt", "json": "json"}[self.value]

    @property
    def template_name(self) -> str:
        """Name the template is registered under, e.g. ``template.html``."""
        return f"template.{self.extension}"


class ViewMode(Enum):
    """Which derived view of the template is displayed."""

    RENDER = "render"
    TOKENS = "tokens"
    AST = "ast"
    INSTRUCTIONS = "instructions"


class ResultKind(Enum):
    """Discriminator for EngineResult."""

    SUCCESS = "success"
    ENGINE_ERROR = "engine_error"
    CONTEXT_ERROR = "context_error"


def to_json_value(value: Any) -> JSONValue:
    """Normalize an engine-produced value into plain JSON-compatible data.

    Tuples and sets become lists, mapping keys become strings, and anything
    else that is not a JSON scalar is represented by its ``repr``.
    """
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        # Drops str subclasses such as markupsafe.Markup
        return str(value)
    if isinstance(value, dict):
        return {str(k): to_json_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_value(v) for v in value]
    if isinstance(value, (set, frozenset)):
        return sorted((to_json_value(v) for v in value), key=repr)
    return repr(value)


@dataclass(frozen=True)
class Span:
    """A source range. Lines and columns are 1-based; the end is exclusive."""

    start_line: int
    start_col: int
    end_line: int
    end_col: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "start_line": self.start_line,
            "start_col": self.start_col,
            "end_line": self.end_line,
            "end_col": self.end_col,
        }

    def __str__(self) -> str:
        return f"{self.start_line}:{self.start_col}-{self.end_line}:{self.end_col}"


@dataclass(frozen=True)
class Token:
    """A lexical token: kind name plus an optional payload value."""

    name: str
    payload: JSONValue = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name}
        if self.payload is not None:
            data["payload"] = self.payload
        return data


@dataclass
class ASTNode:
    """A tagged syntax tree node.

    ``fields`` maps attribute names to plain JSON values, child nodes, or
    lists of child nodes.
    """

    kind: str
    lineno: int = 0
    fields: Dict[str, Any] = field(default_factory=dict)

    @property
    def children(self) -> List["ASTNode"]:
        """Direct child nodes in field order."""
        result: List[ASTNode] = []
        for value in self.fields.values():
            if isinstance(value, ASTNode):
                result.append(value)
            elif isinstance(value, list):
                result.extend(v for v in value if isinstance(v, ASTNode))
        return result

    def walk(self):
        """Yield this node and all descendants, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def to_dict(self) -> Dict[str, Any]:
        def convert(value: Any) -> Any:
            if isinstance(value, ASTNode):
                return value.to_dict()
            if isinstance(value, list):
                return [convert(v) for v in value]
            return value

        return {
            "kind": self.kind,
            "lineno": self.lineno,
            "fields": {k: convert(v) for k, v in self.fields.items()},
        }


@dataclass(frozen=True)
class Instruction:
    """One operation of a compiled template block."""

    op: str
    arg: JSONValue = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"op": self.op}
        if self.arg is not None:
            data["arg"] = self.arg
        return data


@dataclass(frozen=True)
class EngineResult:
    """Outcome of one engine invocation. Never cached across invocations.

    Attributes
    ----------
    kind : ResultKind
        Which variant this result is.
    payload : Any
        The view-specific value on success, otherwise None.
    message : str
        The diagnostic for error variants, otherwise empty.
    """

    kind: ResultKind
    payload: Any = None
    message: str = ""

    @classmethod
    def success(cls, payload: Any) -> "EngineResult":
        return cls(ResultKind.SUCCESS, payload=payload)

    @classmethod
    def engine_error(cls, message: str) -> "EngineResult":
        return cls(ResultKind.ENGINE_ERROR, message=message)

    @classmethod
    def context_error(cls, message: str) -> "EngineResult":
        return cls(ResultKind.CONTEXT_ERROR, message=message)

    @property
    def ok(self) -> bool:
        return self.kind is ResultKind.SUCCESS

    @property
    def is_error(self) -> bool:
        return not self.ok
