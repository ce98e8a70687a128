from __future__ import annotations

from datetime import datetime

import pytest
from pydantic import ValidationError

from auth_api.codec import decode_envelope
from auth_api.exceptions import AuthApiError
from auth_api.models import (
    AppUserRole,
    AuthSuccessResponse,
    DashboardUserRole,
    ErrorClassification,
    SuccessApiResponse,
    User,
)

from conftest import envelope, user_payload


def test_decode_user_envelope_with_camel_case_fields() -> None:
    user = decode_envelope(
        envelope(user_payload("u1", "premiumUser", createdAt="2024-05-01T10:00:00Z", theme="dark")),
        User,
    )

    assert user.id == "u1"
    assert user.app_role is AppUserRole.PREMIUM_USER
    assert user.dashboard_role is DashboardUserRole.NONE
    assert isinstance(user.created_at, datetime)
    # Unknown profile fields are carried as inert payload.
    assert user.model_extra == {"theme": "dark"}


def test_decode_auth_outcome() -> None:
    outcome = decode_envelope(
        envelope({"user": user_payload("g1", "guestUser"), "token": "jwt"}),
        AuthSuccessResponse,
    )

    assert outcome.token == "jwt"
    assert outcome.user.is_anonymous
    assert outcome.identity.id == "g1"


def test_envelope_metadata_is_optional() -> None:
    parsed = SuccessApiResponse[User].model_validate({"data": user_payload("u1")})

    assert parsed.metadata.request_id is None
    assert parsed.data.id == "u1"


@pytest.mark.parametrize(
    "raw",
    [
        None,
        {},
        {"data": None},
        {"data": {"id": "u1"}},
        {"data": user_payload("u1", app_role="superUser")},
    ],
)
def test_malformed_envelopes_raise_decode_error(raw) -> None:
    with pytest.raises(AuthApiError) as excinfo:
        decode_envelope(raw, User)

    assert excinfo.value.classification is ErrorClassification.DECODE_ERROR


def test_user_is_immutable() -> None:
    user = User(id="u1", app_role=AppUserRole.STANDARD_USER)

    with pytest.raises(ValidationError):
        user.id = "u2"  # type: ignore[misc]


def test_error_repr_includes_classification() -> None:
    err = AuthApiError(ErrorClassification.AUTH_FAILED, "Invalid code.", status_code=403)

    assert "auth_failed" in repr(err)
    assert str(err) == "Invalid code."
    assert not err.is_unauthenticated
