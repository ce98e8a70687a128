"""Client-side authentication façade over the backend auth HTTP API.

Convenience re-exports so consumers can write ``from auth_api import
SessionStateChannel`` while the full module paths stay importable.
"""

from auth_api.broadcast import StateBroadcast, Subscription
from auth_api.config import AppConfig, get_config
from auth_api.exceptions import AuthApiError, SessionChannelClosedError
from auth_api.guards import require_auth
from auth_api.http_client import HttpRequestExecutor, RequestExecutor
from auth_api.models import (
    AppUserRole,
    AuthSuccessResponse,
    DashboardUserRole,
    ErrorClassification,
    User,
)
from auth_api.services import ServiceContainer, create_services
from auth_api.services.session_channel import SessionStateChannel

__all__ = [
    "AppConfig",
    "AppUserRole",
    "AuthApiError",
    "AuthSuccessResponse",
    "DashboardUserRole",
    "ErrorClassification",
    "HttpRequestExecutor",
    "RequestExecutor",
    "ServiceContainer",
    "SessionChannelClosedError",
    "SessionStateChannel",
    "StateBroadcast",
    "Subscription",
    "User",
    "create_services",
    "get_config",
    "require_auth",
]
