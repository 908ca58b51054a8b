"""Exception hierarchy for content validation."""

from typing import Optional


class ContentValidationError(Exception):
    """Root exception for the content-validation package."""


class ConfigurationError(ContentValidationError):
    """Raised when validation config or an input filter spec is unusable.

    Surfaced to the operator at build/startup time, never per-request.
    """


class InputFilterNotFoundError(ContentValidationError):
    """Raised when a named input filter was requested but never resolved."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f'Input filter "{name}" has not been resolved')


class InvalidArgumentError(ContentValidationError):
    """Raised when an input filter is given arguments it cannot use."""


class UnknownInputError(InvalidArgumentError):
    """Raised when a validation group names an input the filter does not have."""

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(
            message or f'expects a list of valid input names; "{field}" was not found'
        )
