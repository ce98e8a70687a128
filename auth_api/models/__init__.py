from __future__ import annotations

"""
Data Models Package.

Re-exports all Pydantic models and enumerations:
    from auth_api.models import User, AuthSuccessResponse, SuccessApiResponse
    from auth_api.models import AppUserRole, DashboardUserRole, ErrorClassification
"""

from auth_api.models.enums import AppUserRole, DashboardUserRole, ErrorClassification
from auth_api.models.user import User
from auth_api.models.auth_models import (
    AuthSuccessResponse,
    RequestCodeRequest,
    ResponseMetadata,
    SuccessApiResponse,
    VerifyCodeRequest,
)

__all__ = [
    "AppUserRole",
    "DashboardUserRole",
    "ErrorClassification",
    "User",
    "AuthSuccessResponse",
    "RequestCodeRequest",
    "ResponseMetadata",
    "SuccessApiResponse",
    "VerifyCodeRequest",
]
