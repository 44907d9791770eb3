"""Serialises a generated document as YAML or JSON text."""

import datetime
import json

import yaml

from serverless_openapi.errors import InvalidOutputFormat

OUTPUT_FORMATS = ("yaml", "json")

DEFAULT_OUTPUT_FILES = {"yaml": "openapi.yml", "json": "openapi.json"}


def _check_format(fmt: str) -> str:
    fmt = fmt.lower()
    if fmt not in OUTPUT_FORMATS:
        raise InvalidOutputFormat(fmt)
    return fmt


def _json_default(value):
    # YAML loads unquoted ISO dates (example: 2024-01-01) as date objects
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def default_output_path(fmt: str) -> str:
    return DEFAULT_OUTPUT_FILES[_check_format(fmt)]


def render_document(document: dict, fmt: str = "yaml", indent: int = 2) -> str:
    """Encode the document; key order is kept as assembled."""
    fmt = _check_format(fmt)
    if fmt == "json":
        return json.dumps(document, indent=indent, ensure_ascii=False, default=_json_default) + "\n"
    return yaml.safe_dump(
        document,
        indent=indent,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
    )
