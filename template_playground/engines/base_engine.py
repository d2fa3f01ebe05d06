"""Base classes for template engine adapters."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Tuple

from template_playground.core.types import ASTNode, Instruction, Span, Token


class TemplateEnvironment(ABC):
    """A named collection of template sources registered for one evaluation."""

    @abstractmethod
    def render(self, name: str, context: Any) -> str:
        """Render template ``name`` with an already parsed JSON context.

        Raises
        ------
        EngineError
            On any template or runtime failure.
        """


class EngineAdapter(ABC):
    """Boundary around an external template engine.

    Every operation is synchronous, uncached and a pure function of its
    inputs. Failures are raised as ``EngineError`` carrying the engine's
    own diagnostic.
    """

    name: str = "engine"

    @abstractmethod
    def create_environment(self, files: Mapping[str, str]) -> TemplateEnvironment: ...

    @abstractmethod
    def tokenize(self, source: str) -> List[Tuple[Token, Span]]: ...

    @abstractmethod
    def parse(self, source: str) -> ASTNode: ...

    @abstractmethod
    def instructions(self, source: str) -> Dict[str, List[Instruction]]: ...
