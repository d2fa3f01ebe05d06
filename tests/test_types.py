"""Tests for playground data structures."""

from template_playground.core.types import (
    ASTNode,
    EngineResult,
    Instruction,
    RenderMode,
    ResultKind,
    Span,
    Token,
    to_json_value,
)


def test_render_mode_template_names():
    assert RenderMode.HTML.template_name == "template.html"
    assert RenderMode.TEXT.template_name == "template.txt"
    assert RenderMode.JSON.template_name == "template.json"


def test_span_str():
    assert str(Span(1, 7, 1, 9)) == "1:7-1:9"
    assert Span(2, 1, 2, 3).to_dict() == {
        "start_line": 2,
        "start_col": 1,
        "end_line": 2,
        "end_col": 3,
    }


def test_token_to_dict():
    assert Token("variable_begin").to_dict() == {"name": "variable_begin"}
    assert Token("integer", 42).to_dict() == {"name": "integer", "payload": 42}


def test_instruction_to_dict():
    assert Instruction("RETURN_VALUE").to_dict() == {"op": "RETURN_VALUE"}
    assert Instruction("LOAD_CONST", 1).to_dict() == {"op": "LOAD_CONST", "arg": 1}


def test_to_json_value():
    assert to_json_value((1, "a", None)) == [1, "a", None]
    assert to_json_value({1: {2, 3}}) == {"1": [2, 3]}
    assert to_json_value(object).startswith("<class")


def test_ast_walk_and_children():
    leaf = ASTNode("Name", 1, {"name": "x"})
    output = ASTNode("Output", 1, {"nodes": [leaf, "text"]})
    root = ASTNode("Template", 1, {"body": [output]})
    assert root.children == [output]
    assert output.children == [leaf]
    assert [n.kind for n in root.walk()] == ["Template", "Output", "Name"]


def test_ast_to_dict():
    root = ASTNode("Template", 1, {"body": [ASTNode("TemplateData", 1, {"data": "hi"})]})
    assert root.to_dict() == {
        "kind": "Template",
        "lineno": 1,
        "fields": {
            "body": [{"kind": "TemplateData", "lineno": 1, "fields": {"data": "hi"}}]
        },
    }


def test_engine_result_variants():
    ok = EngineResult.success("x")
    assert ok.ok and not ok.is_error
    assert ok.message == ""

    engine_error = EngineResult.engine_error("bad")
    assert engine_error.kind is ResultKind.ENGINE_ERROR
    assert engine_error.payload is None
    assert engine_error.is_error

    context_error = EngineResult.context_error("worse")
    assert context_error.kind is ResultKind.CONTEXT_ERROR
    assert context_error.message == "worse"
