"""Path aggregation — merges per-endpoint operations into one path tree."""

import logging

from serverless_openapi.errors import DuplicateRouteMethod
from serverless_openapi.generator.operation import Operation
from serverless_openapi.generator.route import normalize_path
from serverless_openapi.parser.base import HTTP_METHODS, EndpointDeclaration, FrozenModel

logger = logging.getLogger(__name__)


class PathItem(FrozenModel):
    path: str
    operations: tuple[tuple[str, Operation], ...]

    @property
    def methods(self) -> list[str]:
        return [method for method, _ in self.operations]

    def operation(self, method: str) -> Operation:
        for name, op in self.operations:
            if name == method.lower():
                return op
        raise KeyError(method)

    def to_openapi(self) -> dict:
        return {method: op.to_openapi() for method, op in self.operations}


class PathTree(FrozenModel):
    """Immutable, deterministically ordered set of path items."""

    path_items: tuple[PathItem, ...] = ()

    @property
    def paths(self) -> list[str]:
        return [item.path for item in self.path_items]

    def get(self, path: str) -> PathItem | None:
        for item in self.path_items:
            if item.path == path:
                return item
        return None

    def __len__(self) -> int:
        return len(self.path_items)

    def to_openapi(self) -> dict:
        return {item.path: item.to_openapi() for item in self.path_items}


class PathAggregator:
    """Collects operations keyed by (normalized path, method).

    Two declarations for the same pair are an authoring error. The built
    tree does not depend on the order in which endpoints were added.
    """

    def __init__(self):
        self._routes: dict[tuple[str, str], tuple[str, Operation]] = {}

    def add(self, declaration: EndpointDeclaration, operation: Operation) -> None:
        path = normalize_path(declaration.path)
        method = declaration.method.lower()
        key = (path, method)
        if key in self._routes:
            first_function, _ = self._routes[key]
            raise DuplicateRouteMethod(path, method, first_function, declaration.function_name)
        self._routes[key] = (declaration.function_name, operation)
        logger.debug("Added %s %s from %s", method.upper(), path, declaration.function_name)

    def build(self) -> PathTree:
        grouped: dict[str, dict[str, Operation]] = {}
        for (path, method), (_, operation) in self._routes.items():
            grouped.setdefault(path, {})[method] = operation

        return PathTree(
            path_items=tuple(
                PathItem(
                    path=path,
                    operations=tuple(
                        (method, grouped[path][method])
                        for method in HTTP_METHODS
                        if method in grouped[path]
                    ),
                )
                for path in sorted(grouped)
            )
        )
