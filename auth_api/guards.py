"""
Authentication Guard Decorator.

Provides a factory that produces a decorator for gating callables
behind an active session on a ``SessionStateChannel``.

Usage::

    auth_guard = require_auth(channel)

    @auth_guard
    def load_profile() -> str:
        return "only reachable when signed in"
"""

from __future__ import annotations

from functools import wraps
from typing import Callable, ParamSpec, TypeVar

from auth_api.exceptions import AuthApiError
from auth_api.models.enums import ErrorClassification
from auth_api.services.session_channel import SessionStateChannel

P = ParamSpec("P")
R = TypeVar("R")


def require_auth(
    channel: SessionStateChannel,
    *,
    allow_anonymous: bool = True,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Return a decorator that enforces a signed-in user on *channel*.

    The check reads the channel's locally known state.  The only backend
    call it can cause is the channel's one-time initialization, when the
    guarded callable is the first thing to touch the channel.

    Args:
        channel: The session channel holding the current user.
        allow_anonymous: When ``False``, guest identities are rejected too.

    Returns:
        A decorator raising ``AuthApiError(UNAUTHENTICATED)`` when the
        requirement is not met.
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            channel.initialize()
            user = channel.current_user
            if user is None:
                raise AuthApiError(
                    ErrorClassification.UNAUTHENTICATED,
                    "Authentication required. Please sign in before "
                    "performing this action.",
                )
            if not allow_anonymous and user.is_anonymous:
                raise AuthApiError(
                    ErrorClassification.UNAUTHENTICATED,
                    "This action requires a registered account.",
                )
            return func(*args, **kwargs)

        return wrapper

    return decorator
