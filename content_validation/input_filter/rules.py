"""Rule plugins — named filters and validators used to build input filters.

Filters normalize a value before validation; validators return a list of
messages (empty = valid). Both are looked up by name through a plugin manager
so declarative specs can reference them as ``{"name": "Digits"}``.
"""

import re
from abc import ABC, abstractmethod
from typing import Any, Optional

import bleach
from email_validator import EmailNotValidError, validate_email

from content_validation.exceptions import ConfigurationError

REQUIRED_MESSAGE = "Value is required and can't be empty"
INVALID_TYPE_MESSAGE = "Invalid type given. String, integer or float expected"


def is_empty(value: Any) -> bool:
    """True for values a required input cannot accept."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def _scalar_to_str(value: Any) -> Optional[str]:
    """Stringify str/int/float; anything else (including bool) is unusable."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value
    return None


# ── Validators ──


class BaseRuleValidator(ABC):
    """A single named validation rule.

    Contract:
        - validate() is deterministic: same value → same messages
        - validate() returns an empty list when the value passes
    """

    name: str = ""

    def __init__(self, **options: Any):
        self.options = options

    @abstractmethod
    def validate(self, value: Any) -> list[str]:
        ...


class DigitsValidator(BaseRuleValidator):
    name = "Digits"

    _pattern = re.compile(r"^[0-9]+$")

    def validate(self, value: Any) -> list[str]:
        text = _scalar_to_str(value)
        if text is None:
            return [INVALID_TYPE_MESSAGE]
        if text == "":
            return ["The input is an empty string"]
        if not self._pattern.match(text):
            return ["The input must contain only digits"]
        return []


class RegexValidator(BaseRuleValidator):
    name = "Regex"

    _flag_map = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL, "x": re.VERBOSE}

    def __init__(self, **options: Any):
        super().__init__(**options)
        pattern = options.get("pattern")
        if not pattern:
            raise ConfigurationError("Regex validator requires a 'pattern' option")

        flags = 0
        for char in options.get("flags", ""):
            if char not in self._flag_map:
                raise ConfigurationError(f"Unsupported regex flag '{char}'")
            flags |= self._flag_map[char]

        try:
            self.pattern = re.compile(pattern, flags)
        except re.error as e:
            raise ConfigurationError(f"Invalid regex pattern '{pattern}': {e}") from e

    def validate(self, value: Any) -> list[str]:
        text = _scalar_to_str(value)
        if text is None:
            return [INVALID_TYPE_MESSAGE]
        if not self.pattern.search(text):
            return [f"The input does not match against pattern '{self.pattern.pattern}'"]
        return []


class AlphaValidator(BaseRuleValidator):
    name = "Alpha"

    def validate(self, value: Any) -> list[str]:
        text = _scalar_to_str(value)
        if text is None:
            return [INVALID_TYPE_MESSAGE]
        if text == "":
            return ["The input is an empty string"]
        if self.options.get("allow_white_space"):
            text = re.sub(r"\s", "", text)
        if not text.isalpha():
            return ["The input contains non alphabetic characters"]
        return []


class AlnumValidator(BaseRuleValidator):
    name = "Alnum"

    def validate(self, value: Any) -> list[str]:
        text = _scalar_to_str(value)
        if text is None:
            return [INVALID_TYPE_MESSAGE]
        if text == "":
            return ["The input is an empty string"]
        if self.options.get("allow_white_space"):
            text = re.sub(r"\s", "", text)
        if not text.isalnum():
            return ["The input contains characters which are non alphabetic and no digits"]
        return []


class NotEmptyValidator(BaseRuleValidator):
    name = "NotEmpty"

    def validate(self, value: Any) -> list[str]:
        if is_empty(value):
            return [REQUIRED_MESSAGE]
        return []


class StringLengthValidator(BaseRuleValidator):
    name = "StringLength"

    def validate(self, value: Any) -> list[str]:
        if not isinstance(value, str):
            return ["Invalid type given. String expected"]

        minimum = self.options.get("min", 0)
        maximum = self.options.get("max")
        if len(value) < minimum:
            return [f"The input is less than {minimum} characters long"]
        if maximum is not None and len(value) > maximum:
            return [f"The input is more than {maximum} characters long"]
        return []


class BetweenValidator(BaseRuleValidator):
    name = "Between"

    def __init__(self, **options: Any):
        super().__init__(**options)
        if "min" not in options or "max" not in options:
            raise ConfigurationError("Between validator requires 'min' and 'max' options")

    def validate(self, value: Any) -> list[str]:
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            return ["Invalid type given. Numeric value expected"]
        try:
            number = float(value)
        except ValueError:
            return ["Invalid type given. Numeric value expected"]

        minimum, maximum = self.options["min"], self.options["max"]
        if self.options.get("inclusive", True):
            if not minimum <= number <= maximum:
                return [f"The input is not between '{minimum}' and '{maximum}', inclusively"]
        elif not minimum < number < maximum:
            return [f"The input is not strictly between '{minimum}' and '{maximum}'"]
        return []


class InArrayValidator(BaseRuleValidator):
    name = "InArray"

    def validate(self, value: Any) -> list[str]:
        haystack = self.options.get("haystack", [])
        if self.options.get("strict", False):
            found = any(type(item) is type(value) and item == value for item in haystack)
        else:
            found = any(str(item) == str(value) for item in haystack)
        if not found:
            return ["The input was not found in the haystack"]
        return []


class EmailAddressValidator(BaseRuleValidator):
    name = "EmailAddress"

    def validate(self, value: Any) -> list[str]:
        if not isinstance(value, str):
            return ["Invalid type given. String expected"]
        try:
            # DNS lookups only when check_deliverability is set
            validate_email(value, check_deliverability=bool(self.options.get("check_deliverability", False)))
        except EmailNotValidError as e:
            return [f"The input is not a valid email address: {e}"]
        return []


# ── Filters ──


class BaseFilter(ABC):
    """A single named value filter. Values it does not handle pass through unchanged."""

    name: str = ""

    def __init__(self, **options: Any):
        self.options = options

    @abstractmethod
    def filter(self, value: Any) -> Any:
        ...


class StringTrimFilter(BaseFilter):
    name = "StringTrim"

    def filter(self, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        chars = self.options.get("charlist")
        return value.strip(chars) if chars else value.strip()


class StringToLowerFilter(BaseFilter):
    name = "StringToLower"

    def filter(self, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value


class StringToUpperFilter(BaseFilter):
    name = "StringToUpper"

    def filter(self, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


class ToIntFilter(BaseFilter):
    name = "ToInt"

    def filter(self, value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            return value
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            try:
                return int(value)
            except ValueError:
                pass
        try:
            return int(float(value))
        except (ValueError, OverflowError):
            return value


class BooleanFilter(BaseFilter):
    name = "Boolean"

    _false_values = {"", "0", "false", "no", "off"}

    def filter(self, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower() not in self._false_values
        if value is None:
            return False
        return bool(value)


class StripTagsFilter(BaseFilter):
    name = "StripTags"

    def filter(self, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        return bleach.clean(value, tags=set(self.options.get("allowed_tags", ())), attributes={}, strip=True)


# ── Plugin managers ──


class PluginManager:
    """Name → rule class lookup. Names are matched case-insensitively."""

    kind = "rule"

    def __init__(self, plugins: Optional[list[type]] = None):
        self._plugins: dict[str, type] = {}
        for plugin in plugins or []:
            self.register(plugin.name, plugin)

    def register(self, name: str, plugin: type) -> None:
        self._plugins[name.lower()] = plugin

    def has(self, name: str) -> bool:
        return name.lower() in self._plugins

    def get(self, name: str, options: Optional[dict] = None) -> Any:
        """Instantiate the named rule with ``options``.

        Raises:
            ConfigurationError: unknown name or options the rule rejects
        """
        plugin = self._plugins.get(name.lower())
        if plugin is None:
            raise ConfigurationError(f"Unknown {self.kind} '{name}'")
        try:
            return plugin(**(options or {}))
        except TypeError as e:
            raise ConfigurationError(f"Invalid options for {self.kind} '{name}': {e}") from e


class ValidatorPluginManager(PluginManager):
    kind = "validator"

    def __init__(self, plugins: Optional[list[type]] = None):
        super().__init__(plugins if plugins is not None else DEFAULT_VALIDATORS)


class FilterPluginManager(PluginManager):
    kind = "filter"

    def __init__(self, plugins: Optional[list[type]] = None):
        super().__init__(plugins if plugins is not None else DEFAULT_FILTERS)


DEFAULT_VALIDATORS = [
    DigitsValidator,
    RegexValidator,
    AlphaValidator,
    AlnumValidator,
    NotEmptyValidator,
    StringLengthValidator,
    BetweenValidator,
    InArrayValidator,
    EmailAddressValidator,
]

DEFAULT_FILTERS = [
    StringTrimFilter,
    StringToLowerFilter,
    StringToUpperFilter,
    ToIntFilter,
    BooleanFilter,
    StripTagsFilter,
]
