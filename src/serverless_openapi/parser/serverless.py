"""Serverless service configuration parser.

Reads ``serverless.yml`` (or ``serverless.json``) and converts the global
``custom.documentation`` block and the HTTP events of every function into
typed models. Both the typed documentation shape (``parameters``,
``requestBody``, ``responses``) and the serverless-openapi-documentation
plugin shape (``pathParams``, ``requestModels``, ``methodResponses`` ...)
are accepted.
"""

import json
import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from serverless_openapi.errors import (
    ConfigurationError,
    EmptyOperationResponses,
    InvalidDocumentation,
)
from serverless_openapi.parser.base import (
    DocumentationAnnotation,
    EndpointDeclaration,
    GlobalDocumentation,
)

logger = logging.getLogger(__name__)

HTTP_EVENT_TYPES = ("http", "httpApi")

# Catch-all methods have no OpenAPI equivalent
WILDCARD_METHODS = ("any", "*")

LEGACY_PARAMETER_KEYS = {
    "pathParams": "path",
    "queryParams": "query",
    "requestHeaders": "header",
    "cookieParams": "cookie",
}


class ServerlessLoader(yaml.SafeLoader):
    """Safe loader that reads CloudFormation tags (!Ref, !Sub...) as plain values."""


def _construct_tagged(loader, tag_suffix, node):
    if isinstance(node, yaml.ScalarNode):
        return loader.construct_scalar(node)
    if isinstance(node, yaml.SequenceNode):
        return loader.construct_sequence(node, deep=True)
    return loader.construct_mapping(node, deep=True)


ServerlessLoader.add_multi_constructor("!", _construct_tagged)


def load_service_config(file_path: Path) -> dict:
    """Load a service configuration file as a plain mapping."""
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read {file_path}: {e}") from e

    try:
        if file_path.suffix == ".json":
            data = json.loads(text)
        else:
            data = yaml.load(text, Loader=ServerlessLoader)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot parse {file_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"{file_path} does not contain a service configuration")
    return data


def parse_service(config: dict) -> tuple[GlobalDocumentation, list[EndpointDeclaration]]:
    """Split a service configuration into global metadata and endpoint declarations."""
    service = config.get("service")
    if isinstance(service, dict):
        service = service.get("name")

    custom = config.get("custom") or {}
    metadata = parse_global_documentation(custom.get("documentation") or {}, service)
    declarations = parse_functions(config.get("functions") or {})
    logger.debug("Found %d HTTP endpoint(s)", len(declarations))
    return metadata, declarations


def parse_global_documentation(raw: dict, service_name: str | None = None) -> GlobalDocumentation:
    info = dict(raw.get("info") or {})
    # Flat title/version/description keys are the plugin's original layout
    for key in ("title", "version", "description"):
        if key not in info and key in raw:
            info[key] = raw[key]
    info.setdefault("title", service_name or "API")
    info["version"] = str(info.get("version", "1.0.0"))

    fields = {
        "info": info,
        "servers": [
            {"url": s} if isinstance(s, str) else s for s in raw.get("servers") or []
        ],
        "tags": [{"name": t} if isinstance(t, str) else t for t in raw.get("tags") or []],
        "models": [_model(m) for m in raw.get("models") or []],
        "security_schemes": raw.get("securitySchemes") or {},
        "security": raw.get("security") or [],
    }
    try:
        return GlobalDocumentation(**fields)
    except ValidationError as e:
        raise InvalidDocumentation("custom.documentation", _format_errors(e)) from None


def _model(raw: dict) -> dict:
    return {
        "name": raw.get("name"),
        "schema_body": raw.get("schema"),
        "content_type": raw.get("contentType", raw.get("content_type")),
        "description": raw.get("description"),
    }


def parse_functions(functions: dict) -> list[EndpointDeclaration]:
    declarations = []
    for function_name, function in functions.items():
        function = _mapping(function or {}, f'function "{function_name}"', "function")
        for event in function.get("events") or []:
            if not isinstance(event, dict):
                continue
            for event_type in HTTP_EVENT_TYPES:
                if event_type in event:
                    declaration = parse_http_event(function_name, event[event_type])
                    if declaration is not None:
                        declarations.append(declaration)
    return declarations


def parse_http_event(function_name: str, raw) -> EndpointDeclaration | None:
    """Parse one http/httpApi event; returns None for events OpenAPI cannot express."""
    if isinstance(raw, str):
        method, _, path = raw.strip().partition(" ")
        documentation = None
    elif isinstance(raw, dict):
        method = str(raw.get("method", ""))
        path = str(raw.get("path", ""))
        documentation = raw.get("documentation")
    else:
        raise InvalidDocumentation(
            f'HTTP event of function "{function_name}"',
            "expected a mapping or a 'METHOD path' string",
        )
    path = path.strip()

    if method.lower() in WILDCARD_METHODS or path == "*":
        logger.warning(
            'Skipping catch-all event "%s %s" of function "%s"', method, path, function_name
        )
        return None

    where = f'{method.upper()} {path} (function "{function_name}")'
    annotation = None
    if documentation is not None:
        annotation = parse_documentation(documentation, where)
    try:
        return EndpointDeclaration(
            method=method,
            path=path,
            function_name=function_name,
            documentation=annotation,
        )
    except ValidationError as e:
        raise InvalidDocumentation(where, _format_errors(e)) from None


def parse_documentation(raw: dict, where: str) -> DocumentationAnnotation:
    raw = _mapping(raw, where, "documentation")
    fields = {
        "summary": raw.get("summary"),
        "description": raw.get("description"),
        "tags": raw.get("tags") or [],
        "parameters": _parameters(raw, where),
        "request_body": _request_body(raw, where),
        "responses": _responses(raw, where),
        "operation_id": raw.get("operationId"),
        "deprecated": raw.get("deprecated", False),
    }
    try:
        return DocumentationAnnotation(**fields)
    except ValidationError as e:
        if any(err["type"] == "empty_responses" for err in e.errors()):
            raise EmptyOperationResponses(where) from None
        raise InvalidDocumentation(where, _format_errors(e)) from None


def _mapping(value, where: str, what: str) -> dict:
    if not isinstance(value, dict):
        raise InvalidDocumentation(where, f"{what} must be a mapping, got {type(value).__name__}")
    return value


def _sequence(value, where: str, what: str) -> list:
    if not value:
        return []
    if not isinstance(value, list):
        raise InvalidDocumentation(where, f"{what} must be a list, got {type(value).__name__}")
    return value


def _schema_ref(raw: dict) -> dict | None:
    """Read a schema reference: ``model: Name`` or an inline ``schema``."""
    ref = {}
    if raw.get("model") is not None:
        ref["model"] = raw["model"]
    schema = raw.get("schema")
    if isinstance(schema, str):
        ref["model"] = schema
    elif schema is not None:
        ref["inline"] = schema
    return ref or None


def _parameters(raw: dict, where: str) -> list[dict]:
    params = []
    for p in _sequence(raw.get("parameters"), where, "parameters"):
        p = _mapping(p, where, "parameter")
        params.append(_parameter(p, p.get("in")))
    for key, location in LEGACY_PARAMETER_KEYS.items():
        for p in _sequence(raw.get(key), where, key):
            params.append(_parameter(_mapping(p, where, f"{key} entry"), location))
    return params


def _parameter(raw: dict, location: str | None) -> dict:
    return {
        "name": raw.get("name"),
        "location": location,
        "required": raw.get("required", False),
        "schema_ref": _schema_ref(raw),
        "description": raw.get("description"),
    }


def _request_body(raw: dict, where: str) -> dict | None:
    body = raw.get("requestBody")
    models = raw.get("requestModels") or {}
    if body is None and not models:
        return None

    body = _mapping(body or {}, where, "requestBody")
    models = _mapping(models, where, "requestModels")
    result = {"description": body.get("description")}
    if "required" in body:
        result["required"] = body["required"]
    if models:
        content_type, model = _first_model(models, "requestModels")
        result["content_type"] = content_type
        result["schema_ref"] = {"model": model}
    else:
        result["schema_ref"] = _schema_ref(body)
        if body.get("contentType"):
            result["content_type"] = body["contentType"]
    return result


def _responses(raw: dict, where: str) -> dict[str, dict]:
    responses = {}
    declared = _mapping(raw.get("responses") or {}, where, "responses")
    for status, resp in declared.items():
        resp = _mapping(resp or {}, where, f"response {status}")
        responses[str(status)] = {
            "description": resp.get("description"),
            "schema_ref": _schema_ref(resp),
            "content_type": resp.get("contentType"),
            "headers": _headers(resp.get("headers"), where),
        }

    for resp in _sequence(raw.get("methodResponses"), where, "methodResponses"):
        resp = _mapping(resp, where, "methodResponses entry")
        status = str(resp.get("statusCode", "default"))
        body = _mapping(resp.get("responseBody") or {}, where, f"responseBody of {status}")
        converted = {
            "description": body.get("description", resp.get("description")),
            "headers": _headers(resp.get("responseHeaders"), where),
        }
        models = _mapping(resp.get("responseModels") or {}, where, f"responseModels of {status}")
        if models:
            content_type, model = _first_model(models, f"responseModels of {status}")
            converted["content_type"] = content_type
            converted["schema_ref"] = {"model": model}
        responses[status] = converted
    return responses


def _headers(raw, where: str) -> dict[str, dict]:
    """Response headers, as a name-keyed mapping or a list of named entries."""
    if not raw:
        return {}
    if isinstance(raw, dict):
        items = [(name, _mapping(header or {}, where, f"header {name}")) for name, header in raw.items()]
    else:
        items = []
        for header in _sequence(raw, where, "headers"):
            header = _mapping(header, where, "header")
            items.append((header.get("name"), header))
    return {
        name: {"description": header.get("description"), "schema_ref": _schema_ref(header)}
        for name, header in items
    }


def _first_model(models: dict, where: str) -> tuple[str, str]:
    if len(models) > 1:
        logger.warning("Only the first content type of %s is documented", where)
    return next(iter(models.items()))


def _format_errors(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'value'}: {err['msg']}"
        for err in error.errors()
    )
