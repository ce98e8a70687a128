"""
Authentication Exchange Models.

Pydantic models for the request/response contracts between the
``SessionStateChannel`` and the backend authentication service.

Every successful backend response arrives wrapped in a
``SuccessApiResponse`` envelope; the payload type is supplied by the
caller when decoding.
"""

from __future__ import annotations

from datetime import datetime
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from auth_api.models.user import User

T = TypeVar("T")

_WIRE_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------

class ResponseMetadata(BaseModel):
    """Bookkeeping fields the backend attaches to every response."""

    request_id: Optional[str] = None
    timestamp: Optional[datetime] = None

    model_config = _WIRE_CONFIG


class SuccessApiResponse(BaseModel, Generic[T]):
    """Structured success wrapper around a typed payload.

    Attributes
    ----------
    data:
        The operation-specific payload.
    metadata:
        Request bookkeeping; absent metadata decodes to empty defaults.
    """

    data: T
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)

    model_config = _WIRE_CONFIG


# ---------------------------------------------------------------------------
# Auth outcome
# ---------------------------------------------------------------------------

class AuthSuccessResponse(BaseModel):
    """Result of a completed sign-in exchange.

    The ``token`` is handed back to the caller for storage and is not
    retained by the session channel.
    """

    user: User
    token: str

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    @property
    def identity(self) -> User:
        return self.user


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------

class RequestCodeRequest(BaseModel):
    """Body of ``POST /request-code``."""

    email: str
    is_dashboard_login: bool = False

    model_config = _WIRE_CONFIG


class VerifyCodeRequest(BaseModel):
    """Body of ``POST /verify-code``."""

    email: str
    code: str
    is_dashboard_login: bool = False

    model_config = _WIRE_CONFIG
