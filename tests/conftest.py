"""Shared fixtures for content validation tests."""

from typing import Any, Callable, Optional

import pytest

from content_validation.input_filter.factory import InputFilterFactory
from content_validation.input_filter.input_filter import InputFilter
from content_validation.listener import ContentValidationListener
from content_validation.pipeline import PARAMETER_DATA_PARAM, ParameterDataContainer, RequestEvent
from content_validation.services.container import ServiceContainer
from content_validation.services.registry import InputFilterRegistry

FOO_SPEC = {
    "foo": {
        "name": "foo",
        "validators": [{"name": "Digits"}],
    },
    "bar": {
        "name": "bar",
        "validators": [{"name": "Regex", "options": {"pattern": "^[a-z]+", "flags": "i"}}],
    },
}

NO_CONTAINER = object()


@pytest.fixture
def factory() -> InputFilterFactory:
    return InputFilterFactory()


@pytest.fixture
def foo_filter(factory: InputFilterFactory) -> InputFilter:
    return factory.create_input_filter(FOO_SPEC)


@pytest.fixture
def services(foo_filter: InputFilter) -> ServiceContainer:
    return ServiceContainer({"FooValidator": foo_filter})


@pytest.fixture
def listener(services: ServiceContainer) -> ContentValidationListener:
    return ContentValidationListener(
        {"Foo": {"input_filter": "FooValidator"}},
        InputFilterRegistry(services),
    )


@pytest.fixture
def make_event() -> Callable[..., RequestEvent]:
    """Build a RequestEvent; pass ``body_params=NO_CONTAINER`` to omit parsed body data."""

    def _make(method: str, body_params: Any = None, handler: Optional[str] = "Foo") -> RequestEvent:
        event = RequestEvent(method=method, handler=handler)
        if body_params is not NO_CONTAINER:
            event.set_param(PARAMETER_DATA_PARAM, ParameterDataContainer(body_params=body_params))
        return event

    return _make
