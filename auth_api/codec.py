"""
Envelope Decoding.

Turns a raw success body returned by the transport into a typed
payload, failing with a ``DECODE_ERROR`` classification when the body
does not match the expected shape.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from auth_api.exceptions import AuthApiError
from auth_api.models.auth_models import SuccessApiResponse
from auth_api.models.enums import ErrorClassification

M = TypeVar("M", bound=BaseModel)


def decode_envelope(raw: Optional[Mapping[str, Any]], model: type[M]) -> M:
    """Validate *raw* as ``SuccessApiResponse[model]`` and return its ``data``.

    Raises:
        AuthApiError: ``DECODE_ERROR`` when *raw* is missing or malformed.
    """
    if raw is None:
        raise AuthApiError(
            ErrorClassification.DECODE_ERROR,
            f"Empty response body; expected a {model.__name__} envelope.",
        )
    try:
        envelope = SuccessApiResponse[model].model_validate(raw)
    except ValidationError as exc:
        raise AuthApiError(
            ErrorClassification.DECODE_ERROR,
            f"Malformed {model.__name__} envelope: {exc.error_count()} validation error(s).",
        ) from exc
    return envelope.data
