"""
Shared Enumerations for auth API Models.

All string enumerations for type-safe field constraints.
StrEnum values compare equal to their string equivalents,
so code like ``if user.app_role == 'guestUser'`` keeps working.
"""

from __future__ import annotations
from enum import StrEnum


class AppUserRole(StrEnum):
    """Application-level role of a user.

    ``GUEST_USER`` is what anonymous sign-in produces.
    """

    GUEST_USER = "guestUser"
    STANDARD_USER = "standardUser"
    PREMIUM_USER = "premiumUser"


class DashboardUserRole(StrEnum):
    """Role of a user inside the management dashboard."""

    ADMIN = "admin"
    PUBLISHER = "publisher"
    NONE = "none"


class ErrorClassification(StrEnum):
    """Category assigned to a failed backend exchange.

    Assigned once by the transport and preserved verbatim on the way to
    the caller.  The session channel branches on this tag.
    """

    UNAUTHENTICATED = "unauthenticated"
    INPUT_INVALID = "input_invalid"
    AUTH_FAILED = "auth_failed"
    SERVER_ERROR = "server_error"
    NETWORK_ERROR = "network_error"
    DECODE_ERROR = "decode_error"
