"""API problem model — the structured failure payload returned by the gate."""

from http import HTTPStatus
from typing import Optional

from pydantic import BaseModel, Field, model_validator

PROBLEM_MEDIA_TYPE = "application/problem+json"


class ApiProblem(BaseModel):
    """Problem details for a rejected request.

    ``title`` defaults to the reason phrase of ``status``. ``validation_messages``
    is present only for failed validation (422).
    """

    status: int
    detail: str
    title: Optional[str] = None
    type: str = "about:blank"
    validation_messages: Optional[dict[str, list[str]]] = Field(
        default=None, description="Per-field messages for failed validation"
    )

    model_config = {"frozen": True}

    @model_validator(mode="before")
    @classmethod
    def _default_title(cls, data):
        if isinstance(data, dict) and data.get("title") is None and "status" in data:
            try:
                phrase = HTTPStatus(int(data["status"])).phrase
            except ValueError:
                phrase = "Unknown"
            data = {**data, "title": phrase}
        return data

    def to_dict(self) -> dict:
        """Serialize for the wire, omitting absent optional members."""
        return self.model_dump(exclude_none=True)
