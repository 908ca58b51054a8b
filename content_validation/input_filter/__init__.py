"""Input filters — the validators the request gate runs against body parameters.

Usage:
    from content_validation.input_filter import InputFilterFactory

    input_filter = InputFilterFactory().create_input_filter({
        "foo": {"validators": [{"name": "Digits"}]},
    })
    input_filter.set_data({"foo": "123"})
    assert input_filter.is_valid()
"""

from content_validation.input_filter.base import InputFilterInterface
from content_validation.input_filter.factory import InputFilterAbstractFactory, InputFilterFactory
from content_validation.input_filter.input_filter import Input, InputFilter
from content_validation.input_filter.rules import FilterPluginManager, ValidatorPluginManager

__all__ = [
    "InputFilterInterface",
    "InputFilter",
    "Input",
    "InputFilterFactory",
    "InputFilterAbstractFactory",
    "ValidatorPluginManager",
    "FilterPluginManager",
]
