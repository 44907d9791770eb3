import copy

import pytest

from serverless_openapi.errors import (
    EmptyOperationResponses,
    MissingPathParameter,
    UndeclaredPathParameter,
    UnknownModelReference,
)
from serverless_openapi.generator.validator import (
    check_document,
    check_path_parameters,
    check_references,
    check_responses,
    collect_warnings,
    validate_document,
)

ID_PARAM = {"name": "id", "in": "path", "required": True, "schema": {"type": "string"}}


def _make_document(paths: dict, schemas: dict | None = None, description: str | None = "Widgets") -> dict:
    info = {"title": "Widgets", "version": "1.0.0"}
    if description:
        info["description"] = description
    return {
        "openapi": "3.0.3",
        "info": info,
        "paths": paths,
        "components": {"schemas": schemas or {}},
    }


def _make_operation(**fields) -> dict:
    op = {
        "summary": "Do it",
        "description": "Does it",
        "responses": {"200": {"description": "ok"}},
    }
    op.update(fields)
    return op


class TestCheckReferences:
    def test_resolved_reference(self):
        schema = {"$ref": "#/components/schemas/Widget"}
        doc = _make_document(
            {"/widgets": {"get": _make_operation(responses={"200": {"description": "ok", "content": {"application/json": {"schema": schema}}}})}},
            schemas={"Widget": {"type": "object"}},
        )
        assert check_references(doc) == []

    def test_dangling_reference(self):
        schema = {"type": "array", "items": {"$ref": "#/components/schemas/Widget"}}
        doc = _make_document(
            {"/widgets": {"get": _make_operation(responses={"200": {"description": "ok", "content": {"application/json": {"schema": schema}}}})}}
        )
        errors = check_references(doc)
        assert len(errors) == 1
        assert isinstance(errors[0], UnknownModelReference)
        assert errors[0].name == "Widget"
        assert "/paths/" in errors[0].where

    def test_reference_inside_components(self):
        doc = _make_document({}, schemas={"List": {"items": {"$ref": "#/components/schemas/Item"}}})
        assert [e.name for e in check_references(doc)] == ["Item"]


class TestCheckResponses:
    def test_empty_responses(self):
        doc = _make_document({"/widgets": {"get": _make_operation(responses={})}})
        errors = check_responses(doc)
        assert len(errors) == 1
        assert isinstance(errors[0], EmptyOperationResponses)
        assert errors[0].where == "GET /widgets"

    def test_responses_present(self):
        doc = _make_document({"/widgets": {"get": _make_operation()}})
        assert check_responses(doc) == []


class TestCheckPathParameters:
    def test_matching_parameters(self):
        doc = _make_document({"/widgets/{id}": {"get": _make_operation(parameters=[ID_PARAM])}})
        assert check_path_parameters(doc) == []

    def test_missing_path_parameter(self):
        doc = _make_document({"/widgets/{id}": {"get": _make_operation()}})
        errors = check_path_parameters(doc)
        assert len(errors) == 1
        assert isinstance(errors[0], MissingPathParameter)
        assert errors[0].name == "id"

    def test_undeclared_path_parameter(self):
        param = dict(ID_PARAM, name="x")
        doc = _make_document({"/widgets": {"get": _make_operation(parameters=[param])}})
        errors = check_path_parameters(doc)
        assert len(errors) == 1
        assert isinstance(errors[0], UndeclaredPathParameter)
        assert errors[0].name == "x"

    def test_query_parameter_ignored(self):
        param = {"name": "id", "in": "query", "required": False}
        doc = _make_document({"/widgets": {"get": _make_operation(parameters=[param])}})
        assert check_path_parameters(doc) == []

    def test_path_item_level_parameters(self):
        doc = _make_document({"/widgets/{id}": {"parameters": [ID_PARAM], "get": _make_operation()}})
        assert check_path_parameters(doc) == []

    def test_greedy_placeholder(self):
        param = dict(ID_PARAM, name="proxy")
        doc = _make_document({"/files/{proxy+}": {"get": _make_operation(parameters=[param])}})
        assert check_path_parameters(doc) == []


class TestCollectWarnings:
    def test_clean_document(self):
        doc = _make_document({"/widgets": {"get": _make_operation(operationId="listWidgets")}})
        assert collect_warnings(doc) == []

    def test_missing_texts(self):
        doc = _make_document({"/widgets": {"get": {"responses": {"200": {"description": "ok"}}}}}, description=None)
        warnings = collect_warnings(doc)
        assert "info.description is missing" in warnings
        assert "GET /widgets has no summary" in warnings
        assert "GET /widgets has no description" in warnings

    def test_duplicate_operation_id(self):
        doc = _make_document({
            "/a": {"get": _make_operation(operationId="handler")},
            "/b": {"get": _make_operation(operationId="handler")},
        })
        warnings = collect_warnings(doc)
        assert len(warnings) == 1
        assert "operationId" in warnings[0]

    def test_external_reference(self):
        schema = {"$ref": "https://example.com/schemas/widget.json"}
        doc = _make_document(
            {"/widgets": {"get": _make_operation(responses={"200": {"description": "ok", "content": {"application/json": {"schema": schema}}}})}}
        )
        warnings = collect_warnings(doc)
        assert len(warnings) == 1
        assert "not resolved" in warnings[0]


class TestValidateDocument:
    def test_valid_document_unchanged(self):
        doc = _make_document({"/widgets/{id}": {"get": _make_operation(parameters=[ID_PARAM])}}, description=None)
        before = copy.deepcopy(doc)
        report = validate_document(doc)
        assert report.ok
        assert report.warnings == ["info.description is missing"]
        assert doc == before

    def test_raises_first_hard_error(self):
        doc = _make_document({
            "/widgets/{id}": {"get": _make_operation(responses={})},
            "/other": {"get": _make_operation(responses={"200": {"description": "ok", "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Gone"}}}}})},
        })
        with pytest.raises(UnknownModelReference):
            validate_document(doc)

    def test_raises_path_error(self):
        doc = _make_document({"/widgets/{id}": {"get": _make_operation()}})
        with pytest.raises(MissingPathParameter):
            validate_document(doc)


class TestCheckDocument:
    def test_collects_every_hard_error(self):
        doc = _make_document({
            "/widgets/{id}": {"get": _make_operation(responses={})},
            "/other": {"get": _make_operation(responses={"200": {"description": "ok", "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Gone"}}}}})},
        })
        report = check_document(doc)
        assert not report.ok
        assert [type(e) for e in report.errors] == [
            UnknownModelReference,
            EmptyOperationResponses,
            MissingPathParameter,
        ]

    def test_clean_document(self):
        doc = _make_document({"/widgets": {"get": _make_operation()}})
        report = check_document(doc)
        assert report.ok
        assert report.errors == []
