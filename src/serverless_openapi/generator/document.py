"""Document assembly — the generation pipeline from declarations to document."""

import copy
import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from serverless_openapi.generator.operation import OperationBuilder
from serverless_openapi.generator.paths import PathAggregator, PathTree
from serverless_openapi.generator.registry import ModelRegistry
from serverless_openapi.generator.validator import validate_document
from serverless_openapi.parser.base import EndpointDeclaration, GlobalDocumentation

logger = logging.getLogger(__name__)

OPENAPI_VERSION = "3.0.3"


class DocumentAssembler:
    """Combines global metadata, the path tree and model schemas."""

    def assemble(
        self,
        metadata: GlobalDocumentation,
        path_tree: PathTree,
        schemas: Mapping[str, dict],
    ) -> dict:
        document: dict = {
            "openapi": OPENAPI_VERSION,
            "info": metadata.info.model_dump(exclude_none=True),
        }
        if metadata.servers:
            document["servers"] = [s.model_dump(exclude_none=True) for s in metadata.servers]
        tags = self._dedupe_tags(metadata)
        if tags:
            document["tags"] = tags
        document["paths"] = path_tree.to_openapi()

        components: dict = {"schemas": {name: body for name, body in schemas.items()}}
        if metadata.security_schemes:
            components["securitySchemes"] = dict(metadata.security_schemes)
        document["components"] = components
        if metadata.security:
            document["security"] = list(metadata.security)

        # No shared sub-objects, so YAML output never needs anchors
        return copy.deepcopy(document)

    def _dedupe_tags(self, metadata: GlobalDocumentation) -> list[dict]:
        seen: dict[str, dict] = {}
        for tag in metadata.tags:
            if tag.name not in seen:
                seen[tag.name] = tag.model_dump(exclude_none=True)
        return list(seen.values())


@dataclass
class GenerationResult:
    document: dict
    warnings: list[str] = field(default_factory=list)


def generate_document(
    metadata: GlobalDocumentation,
    declarations: Iterable[EndpointDeclaration],
) -> GenerationResult:
    """Generate and validate an OpenAPI document.

    Every call uses a fresh model registry. Any GenerationError propagates
    and no document is returned.
    """
    registry = ModelRegistry.from_definitions(metadata.models)
    builder = OperationBuilder(registry)
    aggregator = PathAggregator()

    count = 0
    for declaration in declarations:
        aggregator.add(declaration, builder.build(declaration))
        count += 1

    path_tree = aggregator.build()
    logger.info(
        "Assembled %d endpoint(s) on %d path(s) with %d model(s)",
        count, len(path_tree), len(registry),
    )
    document = DocumentAssembler().assemble(metadata, path_tree, registry.snapshot())
    report = validate_document(document)
    return GenerationResult(document=document, warnings=report.warnings)
