"""Input filter factory — builds input filters from declarative specs.

Spec format (field name → input spec):

    {
        "foo": {"validators": [{"name": "Digits"}]},
        "bar": {
            "required": False,
            "filters": [{"name": "StringTrim"}],
            "validators": [{"name": "Regex", "options": {"pattern": "^[a-z]+$", "flags": "i"}}],
        },
    }

Unknown rule names fail with ConfigurationError when the filter is built,
not when a request is validated.
"""

from typing import Any, Mapping, Optional

import structlog
from pydantic import ValidationError

from content_validation.exceptions import ConfigurationError
from content_validation.input_filter.input_filter import Input, InputFilter
from content_validation.input_filter.rules import FilterPluginManager, ValidatorPluginManager
from content_validation.models.config import ContentValidationConfig, InputSpec

logger = structlog.get_logger()


class InputFilterFactory:
    """Deterministic construction: the same spec always yields an equivalent filter."""

    def __init__(
        self,
        validators: Optional[ValidatorPluginManager] = None,
        filters: Optional[FilterPluginManager] = None,
    ):
        self.validators = validators or ValidatorPluginManager()
        self.filters = filters or FilterPluginManager()

    def create_input_filter(self, spec: Mapping[str, Any]) -> InputFilter:
        """Build an InputFilter from a field name → input spec mapping.

        Args:
            spec: Mapping of field name to an InputSpec (or equivalent dict)

        Returns:
            A new InputFilter

        Raises:
            ConfigurationError: malformed spec or unknown filter/validator name
        """
        if not isinstance(spec, Mapping):
            raise ConfigurationError(
                f"Input filter spec must be a mapping; received {type(spec).__name__}"
            )

        input_filter = InputFilter()
        for key, raw in spec.items():
            input_filter.add(self.create_input(key, raw))
        return input_filter

    def create_input(self, key: str, raw: Any) -> Input:
        try:
            input_spec = raw if isinstance(raw, InputSpec) else InputSpec.model_validate(raw)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid spec for input '{key}': {e}") from e

        return Input(
            name=input_spec.name or key,
            required=input_spec.required,
            allow_empty=input_spec.allow_empty,
            filters=[self.filters.get(rule.name, rule.options) for rule in input_spec.filters],
            validators=[
                (self.validators.get(rule.name, rule.options), rule.break_chain_on_failure)
                for rule in input_spec.validators
            ],
        )


class InputFilterAbstractFactory:
    """Creates input filter services named in the ``input_filter_specs`` config section.

    Plugged into a ServiceContainer so the registry can resolve spec-defined
    filters the same way as explicitly registered ones.
    """

    def __init__(self, config: ContentValidationConfig, factory: Optional[InputFilterFactory] = None):
        self.config = config
        self.factory = factory or InputFilterFactory()

    def can_create(self, name: str) -> bool:
        return name in self.config.input_filter_specs

    def create(self, name: str) -> InputFilter:
        spec = self.config.input_filter_specs[name]
        logger.debug("input_filter_building", input_filter=name, inputs=list(spec))
        return self.factory.create_input_filter(spec)
