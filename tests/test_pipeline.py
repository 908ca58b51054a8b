"""Tests for RequestPipeline ordering and short-circuiting."""

from typing import Optional

from content_validation.models.problem import ApiProblem
from content_validation.pipeline import (
    AUTHENTICATION_PRIORITY,
    PARAMETER_DATA_PRIORITY,
    VALIDATION_PRIORITY,
    RequestEvent,
    RequestPipeline,
)


class RecordingStage:
    def __init__(self, name: str, calls: list[str], problem: Optional[ApiProblem] = None):
        self.name = name
        self.calls = calls
        self.problem = problem

    def __call__(self, event: RequestEvent) -> Optional[ApiProblem]:
        self.calls.append(self.name)
        return self.problem


def test_stages_run_by_ascending_priority() -> None:
    calls: list[str] = []
    pipeline = RequestPipeline()
    pipeline.attach(RecordingStage("validate", calls), priority=VALIDATION_PRIORITY)
    pipeline.attach(RecordingStage("auth", calls), priority=AUTHENTICATION_PRIORITY)
    pipeline.attach(RecordingStage("body", calls), priority=PARAMETER_DATA_PRIORITY)

    assert pipeline.run(RequestEvent(method="POST")) is None
    assert calls == ["auth", "body", "validate"]


def test_equal_priorities_keep_registration_order() -> None:
    calls: list[str] = []
    pipeline = RequestPipeline()
    pipeline.attach(RecordingStage("first", calls), priority=5)
    pipeline.attach(RecordingStage("second", calls), priority=5)

    pipeline.run(RequestEvent(method="POST"))

    assert calls == ["first", "second"]


def test_problem_short_circuits_remaining_stages() -> None:
    calls: list[str] = []
    problem = ApiProblem(status=401, detail="Unauthorized")
    pipeline = RequestPipeline()
    pipeline.attach(RecordingStage("auth", calls, problem), priority=AUTHENTICATION_PRIORITY)
    pipeline.attach(RecordingStage("validate", calls), priority=VALIDATION_PRIORITY)

    assert pipeline.run(RequestEvent(method="POST")) is problem
    assert calls == ["auth"]


def test_detach_by_identity() -> None:
    calls: list[str] = []
    keep = RecordingStage("keep", calls)
    drop = RecordingStage("drop", calls)
    pipeline = RequestPipeline()
    pipeline.attach(keep)
    pipeline.attach(drop)

    assert pipeline.detach(drop) is True
    assert pipeline.detach(drop) is False
    assert pipeline.stages() == [keep]


def test_clear() -> None:
    pipeline = RequestPipeline()
    pipeline.attach(RecordingStage("a", []))
    pipeline.clear()

    assert pipeline.stages() == []


def test_event_params() -> None:
    event = RequestEvent(method="POST", handler="Foo")
    event.set_param("key", "value")

    assert event.get_param("key") == "value"
    assert event.get_param("missing", 1) == 1
