"""Template engine adapters."""

from template_playground.engines.base_engine import EngineAdapter, TemplateEnvironment
from template_playground.engines.jinja_engine import JinjaEngine

__all__ = [
    "EngineAdapter",
    "JinjaEngine",
    "TemplateEnvironment",
]
