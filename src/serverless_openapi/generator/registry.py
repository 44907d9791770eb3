"""Registry of named, reusable schema models for one generation run."""

import copy
import logging
from types import MappingProxyType
from typing import Iterable, Mapping

from serverless_openapi.errors import DuplicateModelConflict, UnknownModelReference
from serverless_openapi.parser.base import ModelDefinition

logger = logging.getLogger(__name__)


class ModelRegistry:
    """Stores model schema bodies by name.

    A name can be registered more than once only with a structurally equal
    body. Create one registry per run; it is never shared between documents.
    """

    def __init__(self):
        self._schemas: dict[str, dict] = {}
        self._content_types: dict[str, str | None] = {}

    @classmethod
    def from_definitions(cls, models: Iterable[ModelDefinition]) -> "ModelRegistry":
        registry = cls()
        for model in models:
            registry.register(model.name, model.schema_body, model.content_type)
        return registry

    def register(self, name: str, schema_body: dict, content_type: str | None = None) -> None:
        """Register a model, or do nothing if the same body is already stored."""
        existing = self._schemas.get(name)
        if existing is not None:
            if existing != schema_body:
                raise DuplicateModelConflict(name)
            logger.debug("Model %s already registered with an identical schema", name)
            return

        self._schemas[name] = copy.deepcopy(schema_body)
        self._content_types[name] = content_type
        logger.debug("Registered model %s", name)

    def resolve(self, name: str) -> dict:
        """Return a copy of the schema body registered under ``name``."""
        try:
            return copy.deepcopy(self._schemas[name])
        except KeyError:
            raise UnknownModelReference(name) from None

    def content_type(self, name: str) -> str | None:
        if name not in self._schemas:
            raise UnknownModelReference(name)
        return self._content_types[name]

    def snapshot(self) -> Mapping[str, dict]:
        """Read-only view of every registered model, in registration order."""
        return MappingProxyType(copy.deepcopy(self._schemas))

    def __contains__(self, name: object) -> bool:
        return name in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)
