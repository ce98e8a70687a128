"""
HTTP Request Executor.

Defines the ``RequestExecutor`` protocol consumed by the session
channel and ships ``HttpRequestExecutor``, an implementation on top of
a ``requests.Session``.

The executor owns the transport concerns: base URL, bearer-token
injection, timeouts, and classification of every failure into an
``ErrorClassification``.  It never retries.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Protocol

import requests

from auth_api.exceptions import AuthApiError
from auth_api.logger import StructuredLogger
from auth_api.models.enums import ErrorClassification

JsonObject = dict[str, Any]
TokenProvider = Callable[[], Optional[str]]

_STATUS_CLASSIFICATION: dict[int, ErrorClassification] = {
    400: ErrorClassification.INPUT_INVALID,
    401: ErrorClassification.UNAUTHENTICATED,
    403: ErrorClassification.AUTH_FAILED,
    404: ErrorClassification.INPUT_INVALID,
    409: ErrorClassification.INPUT_INVALID,
    422: ErrorClassification.INPUT_INVALID,
}


def classify_status(status_code: int) -> ErrorClassification:
    """Map an HTTP error status to its classification.

    Statuses without an explicit mapping count as server errors.
    """
    return _STATUS_CLASSIFICATION.get(status_code, ErrorClassification.SERVER_ERROR)


class RequestExecutor(Protocol):
    """Performs one backend call and returns the parsed success body.

    Implementations raise ``AuthApiError`` for every failure.
    """

    def execute(
        self,
        method: str,
        path: str,
        body: Optional[JsonObject] = None,
    ) -> Optional[JsonObject]:
        ...


class HttpRequestExecutor:
    """``RequestExecutor`` backed by ``requests``.

    Parameters
    ----------
    base_url:
        Backend origin; *path* arguments are appended to it.
    timeout_s:
        Per-request timeout.  A timeout surfaces as ``NETWORK_ERROR``.
    logger:
        Structured JSON logger.
    token_provider:
        Optional callable returning the current session token, injected
        as ``Authorization: Bearer <token>`` when it yields one.
        A provider that raises fails the request with ``NETWORK_ERROR``
        before anything is sent.
    session:
        Optional pre-configured ``requests.Session``.  A session created
        here is closed by :meth:`close`; an injected one is left open.
    """

    def __init__(
        self,
        base_url: str,
        logger: StructuredLogger,
        *,
        timeout_s: float = 10.0,
        token_provider: Optional[TokenProvider] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._logger: StructuredLogger = logger
        self._base_url: str = base_url.rstrip("/")
        self._timeout_s: float = timeout_s
        self._token_provider: Optional[TokenProvider] = token_provider
        self._owns_session: bool = session is None
        self._session: requests.Session = session or requests.Session()

    def execute(
        self,
        method: str,
        path: str,
        body: Optional[JsonObject] = None,
    ) -> Optional[JsonObject]:
        url = f"{self._base_url}{path}"
        headers: dict[str, str] = {"Accept": "application/json"}
        if self._token_provider is not None:
            try:
                token = self._token_provider()
            except Exception as exc:
                raise AuthApiError(
                    ErrorClassification.NETWORK_ERROR,
                    f"Could not read the session token for {path}: {exc}",
                ) from exc
            if token:
                headers["Authorization"] = f"Bearer {token}"

        self._logger.debug(
            "HTTP %s %s", method, path,
            extra={"event": "HTTP_REQUEST", "method": method, "path": path},
        )

        try:
            response = self._session.request(
                method=method,
                url=url,
                headers=headers,
                json=body,
                timeout=self._timeout_s,
                allow_redirects=False,
            )
        except requests.Timeout as exc:
            raise AuthApiError(
                ErrorClassification.NETWORK_ERROR,
                f"Request to {path} timed out after {self._timeout_s}s.",
            ) from exc
        except requests.RequestException as exc:
            raise AuthApiError(
                ErrorClassification.NETWORK_ERROR,
                f"Cannot reach the server for {path}: {exc}",
            ) from exc

        if response.status_code >= 400:
            raise AuthApiError(
                classify_status(response.status_code),
                self._error_message(response),
                status_code=response.status_code,
            )

        if not response.content:
            return None

        try:
            payload = response.json()
        except ValueError as exc:
            raise AuthApiError(
                ErrorClassification.DECODE_ERROR,
                f"Response from {path} is not valid JSON.",
                status_code=response.status_code,
            ) from exc

        if not isinstance(payload, dict):
            raise AuthApiError(
                ErrorClassification.DECODE_ERROR,
                f"Response from {path} is not a JSON object.",
                status_code=response.status_code,
            )
        return payload

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        """Extract ``error.message`` from a backend error body, if present."""
        fallback = f"HTTP {response.status_code}"
        try:
            payload = response.json()
        except ValueError:
            return fallback
        if isinstance(payload, dict):
            error = payload.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
        return fallback

    def close(self) -> None:
        """Release the underlying session if this executor created it."""
        if self._owns_session:
            self._session.close()
