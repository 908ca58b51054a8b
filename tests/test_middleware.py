"""End-to-end tests: FastAPI app with the validation middleware stack."""

from typing import Iterator

import pytest
from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient

from conftest import FOO_SPEC
from content_validation.api.dependencies import get_input_filter, get_validated_values
from content_validation.config import Settings
from content_validation.exceptions import ConfigurationError
from content_validation.main import create_app
from content_validation.models.config import ContentValidationConfig
from content_validation.models.problem import PROBLEM_MEDIA_TYPE
from content_validation.services.container import ServiceContainer


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, CONTENT_VALIDATION_CONFIG="", PRELOAD_INPUT_FILTERS=True)


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    module_config = ContentValidationConfig.model_validate({
        "content_validation": {
            "Foo": {"input_filter": "FooValidator"},
            "Missing": {"input_filter": "NoSuchValidator"},
        },
        "input_filter_specs": {"FooValidator": FOO_SPEC},
    })
    app = create_app(settings=settings, module_config=module_config)

    @app.post("/foo", name="Foo")
    async def create_foo(values: dict = Depends(get_validated_values)):
        return {"values": values}

    @app.patch("/foo/{foo_id}", name="Foo")
    async def update_foo(foo_id: int, request: Request):
        input_filter = get_input_filter(request)
        return {"id": foo_id, "values": request.state.validated_values, "filtered": input_filter is not None}

    @app.get("/foo", name="Foo")
    async def list_foo():
        return {"items": []}

    @app.post("/missing", name="Missing")
    async def missing():
        return {"ok": True}

    @app.post("/open", name="Open")
    async def open_endpoint(request: Request):
        return {"filtered": get_input_filter(request) is not None}

    return app


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


class TestValidationMiddleware:
    def test_valid_body_reaches_handler(self, client: TestClient) -> None:
        response = client.post("/foo", json={"foo": 123, "bar": "abc"})

        assert response.status_code == 200
        assert response.json() == {"values": {"foo": 123, "bar": "abc"}}

    def test_invalid_body_is_422_problem(self, client: TestClient) -> None:
        response = client.post("/foo", json={"foo": "abc", "bar": 123})

        assert response.status_code == 422
        assert response.headers["content-type"].startswith(PROBLEM_MEDIA_TYPE)
        body = response.json()
        assert body["status"] == 422
        assert body["detail"] == "Failed Validation"
        assert set(body["validation_messages"]) == {"foo", "bar"}

    def test_patch_validates_submitted_fields(self, client: TestClient) -> None:
        response = client.patch("/foo/7", json={"foo": 123})

        assert response.status_code == 200
        assert response.json() == {"id": 7, "values": {"foo": 123}, "filtered": True}

    def test_patch_with_unknown_field_is_400(self, client: TestClient) -> None:
        response = client.patch("/foo/7", json={"foo": 123, "baz": "who cares?"})

        assert response.status_code == 400
        assert response.json()["detail"] == 'Unrecognized field "baz"'

    def test_get_bypasses_validation(self, client: TestClient) -> None:
        response = client.get("/foo")

        assert response.status_code == 200
        assert response.json() == {"items": []}

    def test_unconfigured_route_passes(self, client: TestClient) -> None:
        response = client.post("/open", json={"anything": True})

        assert response.status_code == 200
        assert response.json() == {"filtered": False}

    def test_unknown_input_filter_is_500(self, client: TestClient) -> None:
        response = client.post("/missing", json={})

        assert response.status_code == 500
        assert response.json()["detail"] == (
            'Listed input filter "NoSuchValidator" does not exist; cannot validate request'
        )

    def test_non_json_body_is_treated_as_empty(self, client: TestClient) -> None:
        response = client.post("/foo", content=b"foo=1", headers={"content-type": "text/plain"})

        assert response.status_code == 422
        assert set(response.json()["validation_messages"]) == {"foo", "bar"}

    def test_form_body_is_validated(self, client: TestClient) -> None:
        response = client.post("/foo", data={"foo": "123", "bar": "abc"})

        assert response.status_code == 200
        assert response.json() == {"values": {"foo": "123", "bar": "abc"}}

    def test_invalid_form_body_is_422(self, client: TestClient) -> None:
        response = client.post("/foo", data={"foo": "abc", "bar": "abc"})

        assert response.status_code == 422
        assert set(response.json()["validation_messages"]) == {"foo"}

    def test_malformed_json_is_400(self, client: TestClient) -> None:
        response = client.post("/foo", content=b"{nope", headers={"content-type": "application/json"})

        assert response.status_code == 400
        assert response.json()["detail"].startswith("JSON decoding error")

    def test_unmatched_path_is_404(self, client: TestClient) -> None:
        assert client.post("/nowhere", json={}).status_code == 404


class TestHealth:
    def test_reports_validation_status(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["validation"]["routes_configured"] == 2
        assert body["validation"]["input_filters_cached"] == ["FooValidator"]


class TestStartup:
    def test_broken_spec_fails_startup(self, settings: Settings) -> None:
        module_config = ContentValidationConfig.model_validate({
            "input_filter_specs": {"Broken": {"foo": {"validators": [{"name": "Nope"}]}}},
        })
        app = create_app(settings=settings, module_config=module_config)

        with pytest.raises(ConfigurationError):
            with TestClient(app):
                pass

    def test_explicit_services_are_used(self, settings: Settings) -> None:
        from content_validation.input_filter.factory import InputFilterFactory

        services = ServiceContainer({"FooValidator": InputFilterFactory().create_input_filter(FOO_SPEC)})
        module_config = ContentValidationConfig.model_validate({
            "content_validation": {"Foo": {"POST": "FooValidator"}},
        })
        app = create_app(settings=settings, module_config=module_config, services=services)

        @app.post("/foo", name="Foo")
        async def create_foo():
            return {"ok": True}

        with TestClient(app) as client:
            assert client.post("/foo", json={"foo": 1, "bar": "a"}).status_code == 200
            assert client.post("/foo", json={"foo": "a"}).status_code == 422
