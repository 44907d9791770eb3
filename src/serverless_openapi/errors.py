"""Errors raised while generating an OpenAPI document.

All of them are configuration-authoring errors: none is transient, and a run
that raises one produces no document.
"""


class GenerationError(Exception):
    """Base class for every error raised by the generator."""


class ConfigurationError(GenerationError):
    """The service configuration could not be read or has the wrong shape."""


class InvalidDocumentation(ConfigurationError):
    """A documentation block failed validation."""

    def __init__(self, where: str, details: str):
        self.where = where
        self.details = details
        super().__init__(f"Invalid documentation for {where}: {details}")


class InvalidOutputFormat(GenerationError):
    def __init__(self, fmt: str):
        self.fmt = fmt
        super().__init__(f'Invalid output format "{fmt}" - must be one of "yaml" or "json"')


class DuplicateModelConflict(GenerationError):
    """A model name was registered twice with different schema bodies."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f'Model "{name}" is already registered with a different schema')


class UnknownModelReference(GenerationError):
    """A named schema reference does not match any registered model."""

    def __init__(self, name: str, where: str | None = None):
        self.name = name
        self.where = where
        message = f'Unknown model reference "{name}"'
        if where:
            message += f" in {where}"
        super().__init__(message)


class DuplicateParameter(GenerationError):
    def __init__(self, name: str, location: str, where: str):
        self.name = name
        self.location = location
        self.where = where
        super().__init__(f'Parameter "{name}" ({location}) is declared twice in {where}')


class DuplicateRouteMethod(GenerationError):
    """Two endpoint declarations share the same normalized path and method."""

    def __init__(self, path: str, method: str, first: str, second: str):
        self.path = path
        self.method = method
        super().__init__(
            f"{method.upper()} {path} is declared by both "
            f'"{first}" and "{second}"'
        )


class MissingPathParameter(GenerationError):
    """A path template placeholder has no matching path parameter."""

    def __init__(self, name: str, path: str, method: str):
        self.name = name
        self.path = path
        self.method = method
        super().__init__(
            f'{method.upper()} {path}: placeholder "{{{name}}}" has no declared path parameter'
        )


class UndeclaredPathParameter(GenerationError):
    """A path parameter does not appear in the path template."""

    def __init__(self, name: str, path: str, method: str):
        self.name = name
        self.path = path
        self.method = method
        super().__init__(
            f'{method.upper()} {path}: path parameter "{name}" is not in the path template'
        )


class EmptyOperationResponses(GenerationError):
    def __init__(self, where: str):
        self.where = where
        super().__init__(f"{where} does not describe any response")
