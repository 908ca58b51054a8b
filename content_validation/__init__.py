"""Content validation — validates request bodies against per-route input filters.

Usage:
    listener = ContentValidationListener({"Foo": {"input_filter": "FooValidator"}}, registry)
    listener.attach(pipeline)
    problem = pipeline.run(event)
"""

from content_validation.listener import ContentValidationListener
from content_validation.models.problem import ApiProblem
from content_validation.pipeline import (
    INPUT_FILTER_PARAM,
    PARAMETER_DATA_PARAM,
    ParameterDataContainer,
    RequestEvent,
    RequestPipeline,
)
from content_validation.services.registry import InputFilterRegistry

__all__ = [
    "ContentValidationListener",
    "InputFilterRegistry",
    "ApiProblem",
    "RequestEvent",
    "RequestPipeline",
    "ParameterDataContainer",
    "INPUT_FILTER_PARAM",
    "PARAMETER_DATA_PARAM",
]
