"""Endpoint dependencies — expose the input filter that validated the request."""

from typing import Any, Optional

from fastapi import HTTPException, Request

from content_validation.input_filter.base import InputFilterInterface


def get_input_filter(request: Request) -> Optional[InputFilterInterface]:
    """The input filter that validated this request, or None when none ran.

    The instance is shared by every request routed to the same input filter,
    so its messages and values reflect whichever request used it last. Read
    this request's filtered values through ``get_validated_values``.
    """
    return getattr(request.state, "input_filter", None)


def get_validated_values(request: Request) -> dict[str, Any]:
    """Filtered values captured when this request passed validation.

    Raises:
        HTTPException: 500 if no input filter validated this request
    """
    values = getattr(request.state, "validated_values", None)
    if values is None:
        raise HTTPException(status_code=500, detail="No input filter validated this request")
    return values
