"""Typed data models for endpoint and schema documentation.

The service configuration loader converts the raw ``serverless.yml`` shapes
into these models; everything downstream works on validated values only.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic_core import PydanticCustomError

# Canonical OpenAPI method order, also used when emitting path items.
HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

DEFAULT_CONTENT_TYPE = "application/json"


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class SchemaRef(FrozenModel):
    """Either a named reference into the model registry or an inline schema."""

    model: str | None = None
    inline: dict | None = None

    @model_validator(mode="after")
    def _exactly_one(self):
        if (self.model is None) == (self.inline is None):
            raise ValueError("a schema needs exactly one of a model name or an inline body")
        return self

    @property
    def is_named(self) -> bool:
        return self.model is not None


class ParameterSpec(FrozenModel):
    """A single operation parameter. Path parameters are always required."""

    name: str
    location: Literal["path", "query", "header", "cookie"]
    required: bool = False
    schema_ref: SchemaRef | None = None
    description: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _path_params_are_required(cls, data):
        if isinstance(data, dict) and data.get("location") == "path":
            data = {**data, "required": True}
        return data


class RequestBodySpec(FrozenModel):
    schema_ref: SchemaRef
    content_type: str = DEFAULT_CONTENT_TYPE
    description: str | None = None
    required: bool = True


class HeaderSpec(FrozenModel):
    description: str | None = None
    schema_ref: SchemaRef | None = None


class ResponseSpec(FrozenModel):
    """One documented response. A body schema is optional (e.g. 204)."""

    description: str | None = None
    schema_ref: SchemaRef | None = None
    content_type: str | None = None
    headers: dict[str, HeaderSpec] = {}


class DocumentationAnnotation(FrozenModel):
    """Documentation attached to one endpoint; must describe a response."""

    summary: str | None = None
    description: str | None = None
    tags: list[str] = []
    parameters: list[ParameterSpec] = []
    request_body: RequestBodySpec | None = None
    responses: dict[str, ResponseSpec]
    operation_id: str | None = None
    deprecated: bool = False

    @field_validator("responses", mode="before")
    @classmethod
    def _status_codes_as_strings(cls, value):
        # YAML loads bare status codes (200:) as integers
        if isinstance(value, dict):
            return {str(status): resp for status, resp in value.items()}
        return value

    @field_validator("responses")
    @classmethod
    def _at_least_one_response(cls, value):
        if not value:
            raise PydanticCustomError(
                "empty_responses", "documentation must describe at least one response"
            )
        return value

    @field_validator("tags")
    @classmethod
    def _unique_tags(cls, value):
        return list(dict.fromkeys(value))


class EndpointDeclaration(FrozenModel):
    """One HTTP method + path template pairing surfaced by a function."""

    method: str
    path: str
    function_name: str
    documentation: DocumentationAnnotation | None = None

    @field_validator("method")
    @classmethod
    def _known_method(cls, value: str) -> str:
        method = value.lower()
        if method not in HTTP_METHODS:
            raise ValueError(f"unsupported HTTP method {value!r}")
        return method

    @property
    def label(self) -> str:
        return f'{self.method.upper()} {self.path} (function "{self.function_name}")'


class ModelDefinition(FrozenModel):
    name: str
    schema_body: dict
    content_type: str | None = None
    description: str | None = None


class Info(FrozenModel):
    title: str
    version: str
    description: str | None = None


class Server(FrozenModel):
    url: str
    description: str | None = None


class Tag(FrozenModel):
    name: str
    description: str | None = None


class GlobalDocumentation(FrozenModel):
    """Document-wide metadata read from ``custom.documentation``."""

    info: Info
    servers: list[Server] = []
    tags: list[Tag] = []
    models: list[ModelDefinition] = []
    security_schemes: dict[str, dict] = {}
    security: list[dict] = []
