import datetime
import json

import pytest
import yaml

from serverless_openapi.errors import InvalidOutputFormat
from serverless_openapi.output import default_output_path, render_document

DOCUMENT = {
    "openapi": "3.0.3",
    "info": {"title": "Widgets", "version": "1.0.0"},
    "paths": {"/widgets": {"get": {"responses": {"200": {"description": "ok"}}}}},
    "components": {"schemas": {}},
}


class TestRenderDocument:
    def test_yaml_keeps_key_order(self):
        text = render_document(DOCUMENT, "yaml")
        assert yaml.safe_load(text) == DOCUMENT
        assert text.index("openapi") < text.index("info") < text.index("paths")

    def test_yaml_indent(self):
        text = render_document(DOCUMENT, "yaml", indent=4)
        assert "\n    title: Widgets" in text

    def test_json_indent(self):
        text = render_document(DOCUMENT, "json", indent=3)
        assert json.loads(text) == DOCUMENT
        assert '\n   "openapi"' in text

    def test_format_case_insensitive(self):
        assert json.loads(render_document(DOCUMENT, "JSON")) == DOCUMENT

    def test_unknown_format(self):
        with pytest.raises(InvalidOutputFormat):
            render_document(DOCUMENT, "xml")


class TestDefaultOutputPath:
    def test_defaults(self):
        assert default_output_path("yaml") == "openapi.yml"
        assert default_output_path("json") == "openapi.json"


class TestRenderDates:
    def test_json_writes_dates_as_iso_strings(self):
        document = {
            "components": {
                "schemas": {
                    "Event": {
                        "type": "object",
                        "properties": {
                            "when": {"type": "string", "format": "date", "example": datetime.date(2024, 1, 1)},
                            "at": {"type": "string", "format": "date-time", "example": datetime.datetime(2024, 1, 1, 9, 30)},
                        },
                    }
                }
            }
        }
        props = json.loads(render_document(document, "json"))["components"]["schemas"]["Event"]["properties"]
        assert props["when"]["example"] == "2024-01-01"
        assert props["at"]["example"] == "2024-01-01T09:30:00"

    def test_json_still_rejects_unknown_objects(self):
        with pytest.raises(TypeError):
            render_document({"value": object()}, "json")
