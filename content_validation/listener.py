"""Content validation listener — the request gate.

For the matched handler, picks the configured input filter (method-specific
name first, then ``input_filter``), validates the body parameters with it,
and returns an ApiProblem when the request must not reach the handler.

Outcomes:
    None                 request continues (input filter published when one ran)
    ApiProblem(500)      unknown input filter, or no body parameter stage ran
    ApiProblem(400)      PATCH names a field the input filter does not know
    ApiProblem(422)      validation failed; carries validation_messages
"""

from typing import Any, Mapping, Optional

import structlog

from content_validation.exceptions import UnknownInputError
from content_validation.input_filter.base import InputFilterInterface
from content_validation.models.config import RouteValidationConfig
from content_validation.models.problem import ApiProblem
from content_validation.pipeline import (
    INPUT_FILTER_PARAM,
    PARAMETER_DATA_PARAM,
    VALIDATED_VALUES_PARAM,
    VALIDATION_PRIORITY,
    ParameterDataContainer,
    RequestEvent,
    RequestPipeline,
)
from content_validation.services.registry import InputFilterRegistry

logger = structlog.get_logger()

METHODS_WITHOUT_BODIES = frozenset({"GET", "HEAD", "OPTIONS", "DELETE"})


class ContentValidationListener:
    """Validates request bodies against per-handler input filters."""

    def __init__(
        self,
        config: Optional[Mapping[str, RouteValidationConfig]] = None,
        registry: Optional[InputFilterRegistry] = None,
    ):
        self.config = {
            handler: entry if isinstance(entry, RouteValidationConfig)
            else RouteValidationConfig.model_validate(entry)
            for handler, entry in (config or {}).items()
        }
        self.registry = registry or InputFilterRegistry()

    # ── Pipeline registration ──

    def attach(self, pipeline: RequestPipeline, priority: int = VALIDATION_PRIORITY) -> None:
        """Register after authentication and body parameter parsing."""
        pipeline.attach(self.evaluate, priority=priority)

    def detach(self, pipeline: RequestPipeline) -> bool:
        return pipeline.detach(self.evaluate)

    # ── Gate ──

    def evaluate(self, event: RequestEvent) -> Optional[ApiProblem]:
        """Validate the request described by ``event``.

        Returns None to let the request through, or the ApiProblem to respond with.
        """
        method = event.method.upper()
        if method in METHODS_WITHOUT_BODIES:
            return None

        if not event.handler:
            return None

        route_config = self.config.get(event.handler)
        if route_config is None:
            return None

        name = route_config.input_filter_for(method)
        if not name:
            return None

        log = logger.bind(handler=event.handler, input_filter=name, method=method)

        try:
            exists = self.registry.has(name)
        except Exception as e:
            log.error("input_filter_build_failed", error=str(e), error_type=type(e).__name__)
            return ApiProblem(
                status=500,
                detail=f'Listed input filter "{name}" could not be created; cannot validate request',
            )

        if not exists:
            log.error("input_filter_missing")
            return ApiProblem(
                status=500,
                detail=f'Listed input filter "{name}" does not exist; cannot validate request',
            )

        container = event.get_param(PARAMETER_DATA_PARAM)
        if not isinstance(container, ParameterDataContainer):
            log.error("parameter_data_missing")
            return ApiProblem(
                status=500,
                detail=(
                    "content_validation.ContentNegotiation module is not initialized; "
                    "cannot validate request"
                ),
            )

        data = container.body_params
        if data is None or data == "":
            data = {}
        if not isinstance(data, Mapping):
            log.info("body_params_not_a_mapping", body_type=type(data).__name__)
            return ApiProblem(
                status=400,
                detail=f"Request body must be an object of fields; received {type(data).__name__}",
            )

        input_filter = self.registry.get(name)
        event.set_param(INPUT_FILTER_PARAM, input_filter)

        with self.registry.lock(name):
            problem = self._narrow(input_filter, method, data, log)
            if problem is not None:
                return problem
            return self._validate(event, input_filter, data, log)

    def _narrow(
        self,
        input_filter: InputFilterInterface,
        method: str,
        data: Mapping[str, Any],
        log: Any,
    ) -> Optional[ApiProblem]:
        """Limit PATCH requests to the submitted fields; reset the group otherwise."""
        if method != "PATCH":
            try:
                input_filter.set_validation_group(None)
            except Exception as e:
                log.error("validation_group_reset_failed", error=str(e))
                return ApiProblem(status=500, detail=str(e))
            return None

        try:
            input_filter.set_validation_group(list(data))
        except UnknownInputError as e:
            log.info("unrecognized_field", field=e.field)
            return ApiProblem(status=400, detail=f'Unrecognized field "{e.field}"')
        except Exception as e:
            log.info("validation_group_rejected", error=str(e))
            return ApiProblem(status=400, detail=str(e))
        return None

    def _validate(
        self,
        event: RequestEvent,
        input_filter: InputFilterInterface,
        data: Mapping[str, Any],
        log: Any,
    ) -> Optional[ApiProblem]:
        try:
            input_filter.set_data(data)
            valid = input_filter.is_valid()
        except Exception as e:
            log.error("input_filter_failed", error=str(e), error_type=type(e).__name__)
            return ApiProblem(status=500, detail=f"Input filter failed: {e}")

        if valid:
            # Snapshot; the cached instance is reused by later requests
            event.set_param(VALIDATED_VALUES_PARAM, dict(input_filter.get_values()))
            log.debug("content_validation_passed")
            return None

        messages = {field: list(items) for field, items in input_filter.get_messages().items()}
        log.info("content_validation_failed", fields=sorted(messages))
        return ApiProblem(status=422, detail="Failed Validation", validation_messages=messages)
