"""Tests for the output views and the dispatcher."""

import logging

import pytest

from template_playground.core.outputs import (
    AstOutput,
    InstructionsOutput,
    OutputDispatcher,
    RenderOutput,
    TokensOutput,
    format_ast,
    parse_context,
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
from template_playground.engines.base_engine import EngineAdapter
from template_playground.engines.jinja_engine import JinjaEngine
from template_playground.errors import ContextParseError


class _RecordingEngine(EngineAdapter):
    """Engine double that returns fixed payloads and records calls."""

    name = "recording"

    def __init__(self, programs=None, fail_with=None):
        self.calls = []
        self.programs = programs or {"<root>": [Instruction("RETURN_VALUE")]}
        self.fail_with = fail_with

    def create_environment(self, files):
        raise NotImplementedError

    def tokenize(self, source):
        self.calls.append("tokenize")
        if self.fail_with:
            raise self.fail_with
        return [(Token("data", source), Span(1, 1, 1, len(source) + 1))]

    def parse(self, source):
        self.calls.append("parse")
        return ASTNode("Template")

    def instructions(self, source):
        self.calls.append("instructions")
        return self.programs


def _make_dispatcher(mode=ViewMode.RENDER):
    return OutputDispatcher(JinjaEngine(), mode)


def test_parse_context():
    assert parse_context('{"name": "World"}') == {"name": "World"}


def test_parse_context_invalid():
    with pytest.raises(ContextParseError) as excinfo:
        parse_context("{not json")
    assert str(excinfo.value).startswith("Invalid JSON context:")


def test_dispatcher_has_all_views():
    dispatcher = _make_dispatcher()
    assert set(dispatcher.renderers) == set(ViewMode)
    assert isinstance(dispatcher.renderers[ViewMode.RENDER], RenderOutput)
    assert isinstance(dispatcher.renderers[ViewMode.TOKENS], TokensOutput)
    assert isinstance(dispatcher.renderers[ViewMode.AST], AstOutput)
    assert isinstance(dispatcher.renderers[ViewMode.INSTRUCTIONS], InstructionsOutput)


def test_select_changes_mode():
    dispatcher = _make_dispatcher()
    dispatcher.select(ViewMode.AST)
    assert dispatcher.mode is ViewMode.AST
    assert isinstance(dispatcher.renderer, AstOutput)


def test_select_accepts_string():
    dispatcher = _make_dispatcher()
    dispatcher.select("tokens")
    assert dispatcher.mode is ViewMode.TOKENS


def test_dispatch_does_not_change_mode():
    dispatcher = _make_dispatcher()
    dispatcher.dispatch("{{ x }}", "{}", RenderMode.TEXT, mode=ViewMode.TOKENS)
    assert dispatcher.mode is ViewMode.RENDER


def test_render_hello_world():
    dispatcher = _make_dispatcher()
    result = dispatcher.dispatch("Hello {{ name }}!", '{"name":"World"}', RenderMode.TEXT)
    assert result == EngineResult.success("Hello World!")


def test_render_html_mode():
    dispatcher = _make_dispatcher()
    result = dispatcher.dispatch("{{ v }}", '{"v": "<i>"}', RenderMode.HTML)
    assert result.payload == "&lt;i&gt;"


def test_invalid_context_only_affects_render():
    dispatcher = _make_dispatcher()
    template = "Hello {{ name }}!"
    render = dispatcher.dispatch(template, "{not json", RenderMode.HTML)
    assert render.kind is ResultKind.CONTEXT_ERROR
    assert render.payload is None
    for mode in (ViewMode.TOKENS, ViewMode.AST, ViewMode.INSTRUCTIONS):
        result = dispatcher.dispatch(template, "{not json", RenderMode.HTML, mode=mode)
        assert result.ok, mode


def test_syntax_error_is_engine_error():
    dispatcher = _make_dispatcher()
    result = dispatcher.dispatch("{{ ", "{}", RenderMode.HTML)
    assert result.kind is ResultKind.ENGINE_ERROR
    assert result.message
    assert result.payload is None


def test_syntax_error_in_every_compiling_view():
    dispatcher = _make_dispatcher()
    for mode in (ViewMode.RENDER, ViewMode.AST, ViewMode.INSTRUCTIONS):
        result = dispatcher.dispatch("{% if x %}", "{}", RenderMode.TEXT, mode=mode)
        assert result.kind is ResultKind.ENGINE_ERROR, mode


def test_deeply_nested_context_is_context_error(caplog):
    dispatcher = _make_dispatcher()
    with caplog.at_level(logging.ERROR, logger="template_playground"):
        result = dispatcher.dispatch("x", "[" * 100000, RenderMode.TEXT)
    assert result.kind is ResultKind.CONTEXT_ERROR
    assert result.message.startswith("Invalid JSON context:")
    assert caplog.records == []


def test_non_object_context_is_engine_error():
    dispatcher = _make_dispatcher()
    result = dispatcher.dispatch("x", "[1, 2]", RenderMode.TEXT)
    assert result.kind is ResultKind.ENGINE_ERROR


def test_instructions_blocks_sorted():
    programs = {
        "b": [Instruction("RETURN_VALUE")],
        "<root>": [Instruction("RETURN_VALUE")],
        "a": [Instruction("RETURN_VALUE")],
    }
    dispatcher = OutputDispatcher(_RecordingEngine(programs), ViewMode.INSTRUCTIONS)
    result = dispatcher.dispatch("", "{}", RenderMode.TEXT)
    assert list(result.payload) == ["<root>", "a", "b"]


def test_instructions_from_jinja_blocks():
    dispatcher = _make_dispatcher(ViewMode.INSTRUCTIONS)
    template = "{% block b %}B{% endblock %}{% block a %}A{% endblock %}"
    result = dispatcher.dispatch(template, "{}", RenderMode.HTML)
    assert list(result.payload) == ["<root>", "a", "b"]


def test_each_dispatch_invokes_engine():
    engine = _RecordingEngine()
    dispatcher = OutputDispatcher(engine, ViewMode.TOKENS)
    dispatcher.dispatch("x", "{}", RenderMode.TEXT)
    dispatcher.dispatch("x", "{}", RenderMode.TEXT)
    assert engine.calls == ["tokenize", "tokenize"]


def test_only_selected_view_runs():
    engine = _RecordingEngine()
    dispatcher = OutputDispatcher(engine, ViewMode.AST)
    dispatcher.dispatch("x", "{}", RenderMode.TEXT)
    assert engine.calls == ["parse"]


def test_unexpected_exception_is_isolated():
    engine = _RecordingEngine(fail_with=RuntimeError("boom"))
    dispatcher = OutputDispatcher(engine, ViewMode.TOKENS)
    result = dispatcher.dispatch("x", "{}", RenderMode.TEXT)
    assert result.kind is ResultKind.ENGINE_ERROR
    assert result.message == "RuntimeError: boom"


class TestHtml:
    def test_success_classes(self):
        renderer = RenderOutput()
        h = renderer.to_html(EngineResult.success("<b>hi</b>"))
        assert "tpg-output-ok" in h
        assert 'data-view="render"' in h
        assert 'data-result="success"' in h
        assert "&lt;b&gt;hi&lt;/b&gt;" in h

    def test_engine_error_classes(self):
        h = RenderOutput().to_html(EngineResult.engine_error("bad <tag>"))
        assert "tpg-output-error" in h
        assert "bad &lt;tag&gt;" in h

    def test_context_error_classes(self):
        h = RenderOutput().to_html(EngineResult.context_error("Invalid JSON context: x"))
        assert "tpg-output-context-error" in h
        assert 'data-result="context_error"' in h

    def test_tokens_table(self):
        payload = [(Token("name", "x"), Span(1, 4, 1, 5))]
        h = TokensOutput().to_html(EngineResult.success(payload))
        assert "1:4-1:5" in h
        assert "&quot;x&quot;" in h

    def test_instruction_blocks(self):
        payload = {"<root>": [Instruction("LOAD_CONST", 1)], "a": []}
        h = InstructionsOutput().to_html(EngineResult.success(payload))
        assert 'data-block="&lt;root&gt;"' in h
        assert 'data-block="a"' in h
        assert "LOAD_CONST" in h


class TestText:
    def test_error_text_is_message(self):
        assert AstOutput().to_text(EngineResult.engine_error("oops")) == "oops"

    def test_tokens_text(self):
        payload = [(Token("variable_begin"), Span(1, 1, 1, 3))]
        assert TokensOutput().to_text(EngineResult.success(payload)).split() == [
            "1:1-1:3",
            "variable_begin",
        ]

    def test_instructions_text(self):
        payload = {"<root>": [Instruction("LOAD_CONST", "hi"), Instruction("RETURN_VALUE")]}
        text = InstructionsOutput().to_text(EngineResult.success(payload))
        lines = text.splitlines()
        assert lines[0] == "<root>:"
        assert lines[1].split() == ["0", "LOAD_CONST", '"hi"']
        assert lines[2].split() == ["1", "RETURN_VALUE"]


def test_format_ast():
    tree = ASTNode(
        "Template",
        1,
        {"body": [ASTNode("Output", 1, {"nodes": [ASTNode("Name", 1, {"name": "x", "ctx": "load"})]})]},
    )
    assert format_ast(tree).splitlines() == [
        "Template @1",
        "  body:",
        "    Output @1",
        "      nodes:",
        "        Name @1",
        '          name: "x"',
        '          ctx: "load"',
    ]
