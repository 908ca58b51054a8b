"""Request pipeline — ordered request stages with priorities.

A stage is a callable taking the RequestEvent and returning an ApiProblem to
abort the request, or None to continue. Lower priority values run first.

Usage:
    pipeline = RequestPipeline()
    listener.attach(pipeline)
    problem = pipeline.run(event)
    if problem is not None:
        # Render the problem, skip the handler
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional

import structlog

from content_validation.models.problem import ApiProblem

logger = structlog.get_logger()

# Params key under which the body parameter stage publishes a ParameterDataContainer
PARAMETER_DATA_PARAM = "content_validation.parameter_data"

# Params key under which the validation gate publishes the resolved input filter
INPUT_FILTER_PARAM = "content_validation.input_filter"

# Params key holding the filtered values captured when validation passed
VALIDATED_VALUES_PARAM = "content_validation.validated_values"

# Stage priorities: authentication < body parameters < validation < handler
AUTHENTICATION_PRIORITY = 100
PARAMETER_DATA_PRIORITY = 500
VALIDATION_PRIORITY = 650

Stage = Callable[["RequestEvent"], Optional[ApiProblem]]


@dataclass
class ParameterDataContainer:
    """Parsed request parameters, produced by the body parameter stage."""

    body_params: Optional[Mapping[str, Any]] = None
    query_params: dict[str, Any] = field(default_factory=dict)
    route_params: dict[str, Any] = field(default_factory=dict)


@dataclass
class RequestEvent:
    """Per-request state shared by all pipeline stages.

    ``handler`` is the identifier of the matched route (None when nothing matched).
    """

    method: str
    handler: Optional[str] = None
    params: dict[str, Any] = field(default_factory=dict)

    def get_param(self, name: str, default: Any = None) -> Any:
        return self.params.get(name, default)

    def set_param(self, name: str, value: Any) -> None:
        self.params[name] = value


@dataclass
class _StageDefinition:
    stage: Stage
    priority: int
    order: int


class RequestPipeline:
    """Collects request stages and runs them in priority order.

    Stages with equal priority run in registration order.
    """

    def __init__(self) -> None:
        self._definitions: list[_StageDefinition] = []
        self._counter = 0

    def attach(self, stage: Stage, priority: int = 0) -> Stage:
        self._definitions.append(_StageDefinition(stage, priority, self._counter))
        self._counter += 1
        logger.debug("pipeline_stage_attached", stage=_stage_name(stage), priority=priority)
        return stage

    def detach(self, stage: Stage) -> bool:
        """Remove every registration of ``stage`` (by equality). Returns True if any was removed."""
        before = len(self._definitions)
        self._definitions = [d for d in self._definitions if d.stage != stage]
        return len(self._definitions) != before

    def stages(self) -> list[Stage]:
        ordered = sorted(self._definitions, key=lambda d: (d.priority, d.order))
        return [d.stage for d in ordered]

    def run(self, event: RequestEvent) -> Optional[ApiProblem]:
        """Run stages until one returns a problem."""
        for stage in self.stages():
            problem = stage(event)
            if problem is not None:
                logger.info(
                    "pipeline_short_circuited",
                    stage=_stage_name(stage),
                    status=problem.status,
                    handler=event.handler,
                )
                return problem
        return None

    def clear(self) -> None:
        """Remove all stages (testing utility)."""
        self._definitions.clear()


def _stage_name(stage: Stage) -> str:
    owner = getattr(stage, "__self__", None)
    if owner is not None:
        return f"{type(owner).__name__}.{stage.__name__}"
    return getattr(stage, "__name__", type(stage).__name__)
