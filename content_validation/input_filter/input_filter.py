"""InputFilter — a named set of inputs, each with its own filter/validator chain."""

from typing import Any, Iterable, Mapping, Optional

from content_validation.exceptions import InvalidArgumentError, UnknownInputError
from content_validation.input_filter.base import InputFilterInterface
from content_validation.input_filter.rules import (
    REQUIRED_MESSAGE,
    BaseFilter,
    BaseRuleValidator,
    is_empty,
)


class Input:
    """A single field: filters run first, then validators in order."""

    def __init__(
        self,
        name: str,
        required: bool = True,
        allow_empty: bool = False,
        filters: Optional[list[BaseFilter]] = None,
        validators: Optional[list[tuple[BaseRuleValidator, bool]]] = None,
    ):
        self.name = name
        self.required = required
        self.allow_empty = allow_empty
        self.filters = filters or []
        # (validator, break_chain_on_failure)
        self.validators = validators or []

    def filter(self, value: Any) -> Any:
        for f in self.filters:
            value = f.filter(value)
        return value

    def validate(self, value: Any) -> list[str]:
        """Return messages for ``value`` (already filtered); empty = valid."""
        if is_empty(value):
            if self.required and not self.allow_empty:
                return [REQUIRED_MESSAGE]
            return []

        messages: list[str] = []
        for validator, break_chain in self.validators:
            errors = validator.validate(value)
            if errors:
                messages.extend(errors)
                if break_chain:
                    break
        return messages


class InputFilter(InputFilterInterface):
    """Default input filter implementation.

    Usage:
        input_filter = InputFilter([Input("foo", validators=[(DigitsValidator(), False)])])
        input_filter.set_data({"foo": "123"})
        if not input_filter.is_valid():
            messages = input_filter.get_messages()
    """

    def __init__(self, inputs: Optional[Iterable[Input]] = None):
        self._inputs: dict[str, Input] = {}
        self._validation_group: Optional[list[str]] = None
        self._data: dict[str, Any] = {}
        self._messages: dict[str, list[str]] = {}
        self._values: dict[str, Any] = {}
        for item in inputs or []:
            self.add(item)

    def add(self, item: Input) -> None:
        self._inputs[item.name] = item

    def has(self, name: str) -> bool:
        return name in self._inputs

    @property
    def input_names(self) -> list[str]:
        return list(self._inputs)

    def set_validation_group(self, names: Optional[Iterable[str]]) -> None:
        group = list(names) if names is not None else []
        for name in group:
            if not isinstance(name, str) or name not in self._inputs:
                raise UnknownInputError(str(name))
        self._validation_group = group or None

    def set_data(self, data: Mapping[str, Any]) -> None:
        if not isinstance(data, Mapping):
            raise InvalidArgumentError(
                f"set_data expects a mapping; received {type(data).__name__}"
            )
        self._data = dict(data)
        self._messages = {}
        self._values = {}

    def _active_inputs(self) -> list[Input]:
        if self._validation_group is None:
            return list(self._inputs.values())
        return [self._inputs[name] for name in self._validation_group]

    def is_valid(self) -> bool:
        messages: dict[str, list[str]] = {}
        values: dict[str, Any] = {}

        for item in self._active_inputs():
            value = item.filter(self._data.get(item.name))
            errors = item.validate(value)
            if errors:
                messages[item.name] = errors
            else:
                values[item.name] = value

        self._messages = messages
        self._values = values
        return not messages

    def get_messages(self) -> dict[str, list[str]]:
        return {name: list(errors) for name, errors in self._messages.items()}

    def get_values(self) -> dict[str, Any]:
        return dict(self._values)
