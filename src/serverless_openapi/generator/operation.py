"""Operation builder — turns one endpoint declaration into an OpenAPI operation."""

import copy
import logging
import re
from http import HTTPStatus

from serverless_openapi.errors import DuplicateParameter, UnknownModelReference
from serverless_openapi.generator.route import path_placeholders
from serverless_openapi.generator.registry import ModelRegistry
from serverless_openapi.parser.base import (
    DEFAULT_CONTENT_TYPE,
    DocumentationAnnotation,
    EndpointDeclaration,
    FrozenModel,
    ParameterSpec,
    RequestBodySpec,
    ResponseSpec,
    SchemaRef,
)

logger = logging.getLogger(__name__)

DEFAULT_PARAMETER_SCHEMA = {"type": "string"}
DEFAULT_RESPONSES = {"200": {"description": "default response"}}


class Operation(FrozenModel):
    """The OpenAPI object describing one HTTP method on one path."""

    summary: str | None = None
    description: str | None = None
    operation_id: str | None = None
    tags: list[str] = []
    parameters: list[dict] = []
    request_body: dict | None = None
    responses: dict[str, dict]
    deprecated: bool = False

    def to_openapi(self) -> dict:
        """Render as a plain OpenAPI operation mapping, omitting empty fields."""
        result: dict = {}
        if self.summary:
            result["summary"] = self.summary
        if self.description:
            result["description"] = self.description
        if self.operation_id:
            result["operationId"] = self.operation_id
        result["tags"] = list(self.tags)
        if self.parameters:
            result["parameters"] = self.parameters
        if self.request_body is not None:
            result["requestBody"] = self.request_body
        result["responses"] = self.responses
        if self.deprecated:
            result["deprecated"] = True
        return copy.deepcopy(result)


class OperationBuilder:
    """Builds operations, resolving named models through a shared registry."""

    def __init__(self, registry: ModelRegistry):
        self.registry = registry

    def build(self, declaration: EndpointDeclaration) -> Operation:
        doc = declaration.documentation
        if doc is None:
            logger.debug("%s has no documentation, using defaults", declaration.label)
            return self._build_default(declaration)
        logger.debug("Building operation for %s", declaration.label)
        return self._build_documented(declaration, doc)

    def _build_default(self, declaration: EndpointDeclaration) -> Operation:
        # Placeholders still need path parameters for the document to be valid
        parameters = [
            self._render_parameter(
                ParameterSpec(name=name, location="path"), declaration.label
            )
            for name in path_placeholders(declaration.path)
        ]
        return Operation(
            summary=humanize(declaration.function_name),
            operation_id=declaration.function_name,
            tags=[declaration.function_name],
            parameters=parameters,
            responses=copy.deepcopy(DEFAULT_RESPONSES),
        )

    def _build_documented(
        self, declaration: EndpointDeclaration, doc: DocumentationAnnotation
    ) -> Operation:
        where = declaration.label
        return Operation(
            summary=doc.summary,
            description=doc.description,
            operation_id=doc.operation_id or declaration.function_name,
            tags=doc.tags or [declaration.function_name],
            parameters=self._build_parameters(doc.parameters, where),
            request_body=(
                self._build_request_body(doc.request_body, where)
                if doc.request_body is not None
                else None
            ),
            responses={
                status: self._build_response(status, spec, where)
                for status, spec in doc.responses.items()
            },
            deprecated=doc.deprecated,
        )

    def _build_parameters(self, specs: list[ParameterSpec], where: str) -> list[dict]:
        seen: set[tuple[str, str]] = set()
        parameters = []
        for spec in specs:
            key = (spec.name, spec.location)
            if key in seen:
                raise DuplicateParameter(spec.name, spec.location, where)
            seen.add(key)
            parameters.append(self._render_parameter(spec, where))
        return parameters

    def _render_parameter(self, spec: ParameterSpec, where: str) -> dict:
        param = {"name": spec.name, "in": spec.location, "required": spec.required}
        if spec.description:
            param["description"] = spec.description
        if spec.schema_ref is None:
            param["schema"] = dict(DEFAULT_PARAMETER_SCHEMA)
        else:
            param["schema"] = self._resolve(spec.schema_ref, where)
        return param

    def _build_request_body(self, spec: RequestBodySpec, where: str) -> dict:
        body: dict = {}
        if spec.description:
            body["description"] = spec.description
        body["required"] = spec.required
        body["content"] = {
            spec.content_type: {"schema": self._resolve(spec.schema_ref, where)}
        }
        return body

    def _build_response(self, status: str, spec: ResponseSpec, where: str) -> dict:
        response: dict = {"description": spec.description or default_description(status)}
        if spec.headers:
            headers = {}
            for name, header in spec.headers.items():
                rendered: dict = {}
                if header.description:
                    rendered["description"] = header.description
                rendered["schema"] = (
                    self._resolve(header.schema_ref, where)
                    if header.schema_ref is not None
                    else dict(DEFAULT_PARAMETER_SCHEMA)
                )
                headers[name] = rendered
            response["headers"] = headers
        if spec.schema_ref is not None:
            content_type = spec.content_type or self._model_content_type(spec.schema_ref)
            response["content"] = {
                content_type: {"schema": self._resolve(spec.schema_ref, where)}
            }
        return response

    def _model_content_type(self, ref: SchemaRef) -> str:
        if ref.is_named and ref.model in self.registry:
            return self.registry.content_type(ref.model) or DEFAULT_CONTENT_TYPE
        return DEFAULT_CONTENT_TYPE

    def _resolve(self, ref: SchemaRef, where: str) -> dict:
        if not ref.is_named:
            return copy.deepcopy(ref.inline)
        try:
            return self.registry.resolve(ref.model)
        except UnknownModelReference:
            raise UnknownModelReference(ref.model, where) from None


def humanize(function_name: str) -> str:
    """Derive a readable summary from a function name: listWidgets -> List widgets."""
    words = re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", function_name)
    words = re.sub(r"[_\-\s]+", " ", words).strip().lower()
    return words[:1].upper() + words[1:]


def default_description(status: str) -> str:
    if status == "default":
        return "default response"
    try:
        return HTTPStatus(int(status)).phrase
    except ValueError:
        return "response"
