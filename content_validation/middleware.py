"""Starlette/FastAPI middleware — runs the request pipeline before the matched endpoint.

Order of operations (outermost first):
1. BodyParametersMiddleware — decodes a JSON or form body into ``request.state.parameter_data``.
2. ContentValidationMiddleware — resolves the handler identifier from the
   matched route name, runs the pipeline, and either returns the problem
   response or publishes the input filter on ``request.state.input_filter``.

Add them so the body parser wraps the validator:

    app.add_middleware(ContentValidationMiddleware, pipeline=pipeline)
    app.add_middleware(BodyParametersMiddleware)
"""

import json
from typing import Any, Optional

import structlog
from starlette.formparsers import MultiPartException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Match

from content_validation.models.problem import PROBLEM_MEDIA_TYPE, ApiProblem
from content_validation.pipeline import (
    INPUT_FILTER_PARAM,
    PARAMETER_DATA_PARAM,
    VALIDATED_VALUES_PARAM,
    ParameterDataContainer,
    RequestEvent,
    RequestPipeline,
)

logger = structlog.get_logger()

FORM_MEDIA_TYPES = frozenset({"application/x-www-form-urlencoded", "multipart/form-data"})


def problem_response(problem: ApiProblem) -> JSONResponse:
    """Render an ApiProblem as an application/problem+json response."""
    return JSONResponse(
        status_code=problem.status,
        content=problem.to_dict(),
        media_type=PROBLEM_MEDIA_TYPE,
    )


def resolve_handler(request: Request) -> tuple[Optional[str], dict[str, Any]]:
    """Return the name and path params of the route that fully matches the request."""
    app = request.scope.get("app")
    router = getattr(app, "router", None)
    for route in getattr(router, "routes", []):
        match, child_scope = route.matches(request.scope)
        if match == Match.FULL:
            return getattr(route, "name", None), dict(child_scope.get("path_params", {}))
    return None, {}


class BodyParametersMiddleware(BaseHTTPMiddleware):
    """Decodes JSON and form request bodies for the validation stage.

    JSON and form bodies become ``body_params``; other or empty bodies are
    published as ``body_params=None``. A JSON body that cannot be decoded is
    rejected with a 400 problem, as is a malformed multipart body.
    """

    async def dispatch(self, request: Request, call_next: Any) -> Response:
        body_params = None
        media_type = request.headers.get("content-type", "").split(";")[0].strip().lower()

        if "json" in media_type:
            raw = await request.body()
            if raw.strip():
                try:
                    body_params = json.loads(raw)
                except (json.JSONDecodeError, UnicodeDecodeError) as e:
                    logger.info("json_body_invalid", path=request.url.path, error=str(e))
                    return problem_response(ApiProblem(status=400, detail=f"JSON decoding error: {e}"))
        elif media_type in FORM_MEDIA_TYPES:
            # Cache the raw body first so the endpoint can still read it
            await request.body()
            try:
                form = await request.form()
            except MultiPartException as e:
                logger.info("form_body_invalid", path=request.url.path, error=str(e))
                return problem_response(ApiProblem(status=400, detail=f"Form decoding error: {e}"))
            body_params = {
                key: values[0] if len(values) == 1 else values
                for key, values in ((key, form.getlist(key)) for key in form.keys())
            }

        request.state.parameter_data = ParameterDataContainer(
            body_params=body_params,
            query_params=dict(request.query_params),
        )
        return await call_next(request)


class ContentValidationMiddleware(BaseHTTPMiddleware):
    """Runs the request pipeline (including the validation gate) for each request."""

    def __init__(self, app: Any, *, pipeline: RequestPipeline):
        super().__init__(app)
        self.pipeline = pipeline

    async def dispatch(self, request: Request, call_next: Any) -> Response:
        handler, path_params = resolve_handler(request)

        event = RequestEvent(method=request.method, handler=handler)
        container = getattr(request.state, "parameter_data", None)
        if container is not None:
            container.route_params = path_params
            event.set_param(PARAMETER_DATA_PARAM, container)

        problem = self.pipeline.run(event)
        if problem is not None:
            return problem_response(problem)

        input_filter = event.get_param(INPUT_FILTER_PARAM)
        if input_filter is not None:
            request.state.input_filter = input_filter
            request.state.validated_values = event.get_param(VALIDATED_VALUES_PARAM, {})

        return await call_next(request)
