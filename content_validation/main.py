"""Content Validation — request body validation gate for FastAPI services.

Application factory with lifespan management, structured logging, the
validation middleware stack, and global error handling.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request

from content_validation.api.router import api_router
from content_validation.config import Settings, get_settings, load_module_config
from content_validation.exceptions import ConfigurationError
from content_validation.input_filter.factory import InputFilterAbstractFactory
from content_validation.listener import ContentValidationListener
from content_validation.middleware import (
    BodyParametersMiddleware,
    ContentValidationMiddleware,
    problem_response,
)
from content_validation.models.config import ContentValidationConfig
from content_validation.models.problem import ApiProblem
from content_validation.pipeline import RequestPipeline
from content_validation.services.container import ServiceContainer
from content_validation.services.registry import InputFilterRegistry

logger = structlog.get_logger()


def configure_logging(settings: Settings) -> None:
    """Configure structured logging."""
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer() if settings.DEBUG else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    settings: Settings = app.state.settings

    # ── Startup ──
    logger.info("app_starting", debug=settings.DEBUG, routes=len(app.state.listener.config))

    if settings.PRELOAD_INPUT_FILTERS:
        # Surface broken specs at startup instead of on the first request
        registry = app.state.listener.registry
        for name in app.state.module_config.input_filter_specs:
            if not registry.has(name):
                raise ConfigurationError(f'Input filter "{name}" could not be resolved')
        logger.info("input_filters_preloaded", input_filters=registry.cached_names())

    logger.info("app_started")

    yield

    # ── Shutdown ──
    logger.info("app_stopped")


def create_app(
    settings: Optional[Settings] = None,
    module_config: Optional[ContentValidationConfig] = None,
    services: Optional[ServiceContainer] = None,
) -> FastAPI:
    """Build the application.

    Args:
        settings: Settings to use; defaults to environment settings
        module_config: Validation config; defaults to the file named by
            CONTENT_VALIDATION_CONFIG
        services: Service container holding explicitly registered input
            filters; spec-defined filters are added through an abstract factory

    Raises:
        ConfigurationError: the validation config file is unusable
    """
    settings = settings or get_settings()
    configure_logging(settings)

    if module_config is None:
        module_config = load_module_config(settings.CONTENT_VALIDATION_CONFIG)

    services = services or ServiceContainer()
    services.add_abstract_factory(InputFilterAbstractFactory(module_config))

    listener = ContentValidationListener(
        module_config.content_validation,
        InputFilterRegistry(services),
    )
    pipeline = RequestPipeline()
    listener.attach(pipeline, priority=settings.VALIDATION_PRIORITY)

    app = FastAPI(
        title="Content Validation",
        description="Validates request bodies against per-route input filters before handlers run.",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.module_config = module_config
    app.state.services = services
    app.state.listener = listener
    app.state.pipeline = pipeline

    # ── Middleware ──
    # Added last runs first: bodies are decoded before the pipeline runs
    app.add_middleware(ContentValidationMiddleware, pipeline=pipeline)
    app.add_middleware(BodyParametersMiddleware)

    # ── Global Exception Handlers ──

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(request: Request, exc: ConfigurationError):
        """Configuration defects are operator errors, reported as 500 problems."""
        logger.error("configuration_error", path=request.url.path, error=str(exc))
        return problem_response(ApiProblem(status=500, detail=str(exc)))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Catch-all error handler for unhandled exceptions."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return problem_response(
            ApiProblem(status=500, detail="An unexpected error occurred. Please try again.")
        )

    # ── Routes ──

    app.include_router(api_router)

    return app


app = create_app()
