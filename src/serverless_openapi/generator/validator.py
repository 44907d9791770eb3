"""Validates an assembled OpenAPI document before it is handed out.

Each ``check_*`` function walks the document and returns the hard errors it
found; ``collect_warnings`` returns soft findings that do not stop a run.
``check_document`` runs every check in one pass and ``validate_document``
raises the first hard error it reports.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterator

from serverless_openapi.errors import (
    EmptyOperationResponses,
    GenerationError,
    MissingPathParameter,
    UndeclaredPathParameter,
    UnknownModelReference,
)
from serverless_openapi.generator.route import path_placeholders
from serverless_openapi.parser.base import HTTP_METHODS

logger = logging.getLogger(__name__)

SCHEMA_REF_PREFIX = "#/components/schemas/"


@dataclass
class ValidationReport:
    errors: list[GenerationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def iter_operations(document: dict) -> Iterator[tuple[str, str, dict]]:
    """Yield (path, method, operation) for every operation in the document."""
    for path, item in document.get("paths", {}).items():
        for method in HTTP_METHODS:
            if method in item:
                yield path, method, item[method]


def _iter_refs(node, location: str) -> Iterator[tuple[str, str]]:
    if isinstance(node, dict):
        ref = node.get("$ref")
        if isinstance(ref, str):
            yield ref, location
        for key, value in node.items():
            yield from _iter_refs(value, f"{location}/{key}")
    elif isinstance(node, list):
        for index, value in enumerate(node):
            yield from _iter_refs(value, f"{location}/{index}")


def check_references(document: dict) -> list[GenerationError]:
    """Every local schema reference must name an entry in components.schemas."""
    schemas = document.get("components", {}).get("schemas", {})
    errors: list[GenerationError] = []
    for ref, location in _iter_refs(document, "#"):
        if ref.startswith(SCHEMA_REF_PREFIX):
            name = ref[len(SCHEMA_REF_PREFIX):]
            if name not in schemas:
                errors.append(UnknownModelReference(name, location))
    return errors


def check_responses(document: dict) -> list[GenerationError]:
    errors: list[GenerationError] = []
    for path, method, operation in iter_operations(document):
        if not operation.get("responses"):
            errors.append(EmptyOperationResponses(f"{method.upper()} {path}"))
    return errors


def check_path_parameters(document: dict) -> list[GenerationError]:
    """Template placeholders and declared path parameters must match exactly."""
    errors: list[GenerationError] = []
    for path, item in document.get("paths", {}).items():
        placeholders = set(path_placeholders(path))
        shared = [p for p in item.get("parameters", []) if p.get("in") == "path"]
        for method in HTTP_METHODS:
            if method not in item:
                continue
            declared = [
                p for p in item[method].get("parameters", []) if p.get("in") == "path"
            ] + shared
            names = {p.get("name") for p in declared}
            for name in path_placeholders(path):
                if name not in names:
                    errors.append(MissingPathParameter(name, path, method))
            for name in sorted(n for n in names if n not in placeholders):
                errors.append(UndeclaredPathParameter(name, path, method))
    return errors


def collect_warnings(document: dict) -> list[str]:
    warnings = []
    if not document.get("info", {}).get("description"):
        warnings.append("info.description is missing")

    operation_ids: dict[str, str] = {}
    for path, method, operation in iter_operations(document):
        where = f"{method.upper()} {path}"
        if not operation.get("summary"):
            warnings.append(f"{where} has no summary")
        if not operation.get("description"):
            warnings.append(f"{where} has no description")
        operation_id = operation.get("operationId")
        if operation_id:
            if operation_id in operation_ids:
                warnings.append(
                    f'{where} reuses operationId "{operation_id}" from {operation_ids[operation_id]}'
                )
            else:
                operation_ids[operation_id] = where

    for ref, location in _iter_refs(document, "#"):
        if not ref.startswith("#/"):
            warnings.append(f'External reference "{ref}" at {location} is not resolved')
    return warnings


def check_document(document: dict) -> ValidationReport:
    """Run every check on an assembled document and collect the findings.

    The document itself is never modified.
    """
    report = ValidationReport()
    report.errors.extend(check_references(document))
    report.errors.extend(check_responses(document))
    report.errors.extend(check_path_parameters(document))
    report.warnings.extend(collect_warnings(document))
    return report


def validate_document(document: dict) -> ValidationReport:
    """Return the report of a document without hard errors.

    Otherwise the first hard error found is raised.
    """
    report = check_document(document)
    if not report.ok:
        logger.debug("Document has %d hard error(s)", len(report.errors))
        raise report.errors[0]
    for warning in report.warnings:
        logger.warning(warning)
    return report
