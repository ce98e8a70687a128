"""
Error Types.

``AuthApiError`` is the single caller-visible failure type of every
backend exchange.  Its ``classification`` tag is assigned by the
transport (or by envelope decoding) and is never rewritten on the way
up, so callers branch on the tag rather than on exception subclasses::

    try:
        channel.verify_sign_in_code(email, code)
    except AuthApiError as exc:
        if exc.classification is ErrorClassification.INPUT_INVALID:
            ...
"""

from __future__ import annotations

from typing import Optional

from auth_api.models.enums import ErrorClassification


class AuthApiError(Exception):
    """A failed exchange with the authentication backend.

    Parameters
    ----------
    classification:
        Category of the failure.
    message:
        Human-readable description, taken from the backend error body
        when one was returned.
    status_code:
        HTTP status of the response, ``None`` when no response arrived.
    """

    def __init__(
        self,
        classification: ErrorClassification,
        message: str,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.classification: ErrorClassification = classification
        self.message: str = message
        self.status_code: Optional[int] = status_code

    @property
    def is_unauthenticated(self) -> bool:
        """``True`` when the backend reported that no session exists."""
        return self.classification is ErrorClassification.UNAUTHENTICATED

    def __repr__(self) -> str:
        return (
            f"AuthApiError(classification={self.classification.value!r}, "
            f"message={self.message!r}, status_code={self.status_code!r})"
        )


class SessionChannelClosedError(RuntimeError):
    """Raised when a disposed session channel or ended subscription is used."""
