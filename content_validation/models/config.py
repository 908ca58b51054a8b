"""Validation config models — per-route input filter names and input filter specs."""

from typing import Any, Optional

from pydantic import BaseModel, Field

# Methods that may carry their own input filter name
METHOD_KEYS = ("POST", "PATCH", "PUT")


class RouteValidationConfig(BaseModel):
    """Input filter names for one handler.

    At least one of ``input_filter`` or a method key should be set. Method
    keys take precedence over ``input_filter`` for requests of that method.
    """

    input_filter: Optional[str] = None
    POST: Optional[str] = None
    PATCH: Optional[str] = None
    PUT: Optional[str] = None

    model_config = {"frozen": True, "extra": "forbid"}

    def input_filter_for(self, method: str) -> Optional[str]:
        """Resolve the input filter name for an HTTP method, or None."""
        method = method.upper()
        if method in METHOD_KEYS:
            specific = getattr(self, method)
            if specific:
                return specific
        return self.input_filter


class RuleSpec(BaseModel):
    """A filter or validator referenced by plugin name."""

    name: str
    options: dict[str, Any] = Field(default_factory=dict)
    break_chain_on_failure: bool = False

    model_config = {"frozen": True, "extra": "forbid"}


class InputSpec(BaseModel):
    """Declarative description of a single input."""

    name: Optional[str] = None  # Defaults to the key it is declared under
    required: bool = True
    allow_empty: bool = False
    filters: list[RuleSpec] = Field(default_factory=list)
    validators: list[RuleSpec] = Field(default_factory=list)

    model_config = {"frozen": True, "extra": "forbid"}


class ContentValidationConfig(BaseModel):
    """The module config: route → names, and name → input filter spec."""

    content_validation: dict[str, RouteValidationConfig] = Field(default_factory=dict)
    input_filter_specs: dict[str, dict[str, InputSpec]] = Field(default_factory=dict)

    model_config = {"frozen": True}
