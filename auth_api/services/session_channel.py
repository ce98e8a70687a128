"""
Session State Channel.

Single owner of the client-side belief about who is signed in.  Every
authentication operation goes through this class, which:

1. calls the backend through an injected ``RequestExecutor``,
2. interprets the outcome (an ``UNAUTHENTICATED`` answer to ``/me`` is
   the normal "nobody is signed in" result, not an error),
3. replaces and republishes the current ``User`` on a multicast feed.

The first public operation triggers a one-time initialization that
resolves the starting state from ``GET /me``.  Initialization and
``sign_out`` never raise; every other operation propagates the
transport's ``AuthApiError`` unchanged and leaves the current state
untouched when it fails.

Thread Safety
-------------
``_init_lock`` makes initialization happen at most once; operations
racing with it wait until the initial state is published.
``_publish_lock`` guards decode-then-publish, so emissions reach
subscribers in the order the owning network calls completed.  Network
calls themselves run outside both locks.

Usage::

    channel = SessionStateChannel(executor=executor, logger=logger)
    feed = channel.subscribe()
    channel.initialize()
    outcome = channel.verify_sign_in_code("a@b.com", "123456")
    token_store.save(outcome.token)
    ...
    channel.dispose()
"""

from __future__ import annotations

import threading
from typing import Optional, TypeVar

from pydantic import BaseModel

from auth_api.broadcast import StateBroadcast, Subscription
from auth_api.codec import decode_envelope
from auth_api.exceptions import AuthApiError, SessionChannelClosedError
from auth_api.http_client import JsonObject, RequestExecutor
from auth_api.logger import StructuredLogger
from auth_api.models.auth_models import (
    AuthSuccessResponse,
    RequestCodeRequest,
    VerifyCodeRequest,
)
from auth_api.models.enums import ErrorClassification
from auth_api.models.user import User
from auth_api.services.base_service import BaseService

DEFAULT_AUTH_BASE_PATH: str = "/api/v1/auth"

M = TypeVar("M", bound=BaseModel)


class SessionStateChannel(BaseService):
    """Authentication façade that keeps one observable current user.

    Parameters
    ----------
    executor:
        Transport performing the HTTP calls and classifying failures.
    logger:
        Structured JSON logger.
    base_path:
        Prefix of the authentication endpoints.
    initialize_eagerly:
        Resolve the starting state during construction instead of on
        the first operation.  Nobody is subscribed at that point, so the
        result is only visible through :attr:`current_user`.
    """

    def __init__(
        self,
        executor: RequestExecutor,
        logger: StructuredLogger,
        *,
        base_path: str = DEFAULT_AUTH_BASE_PATH,
        initialize_eagerly: bool = False,
    ) -> None:
        super().__init__(logger)
        self._executor: RequestExecutor = executor
        self._base_path: str = base_path.rstrip("/")

        self._broadcast: StateBroadcast[Optional[User]] = StateBroadcast()
        self._current_user: Optional[User] = None
        self._initialized: bool = False
        self._disposed: bool = False

        self._init_lock: threading.Lock = threading.Lock()
        self._publish_lock: threading.RLock = threading.RLock()

        if initialize_eagerly:
            self.initialize()

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def current_user(self) -> Optional[User]:
        """Most recently published user, ``None`` when signed out or unknown."""
        with self._publish_lock:
            return self._current_user

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def subscribe(self) -> Subscription[Optional[User]]:
        """Attach a subscriber to the auth-state feed.

        Only values published after this call are delivered.  Subscribing
        does not trigger initialization; call :meth:`initialize` (or any
        operation) afterwards to receive the starting state.  On a
        disposed channel the subscription is already ended.
        """
        return self._broadcast.subscribe()

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """Resolve and publish the starting state.  Runs at most once.

        Never raises: any failure to determine the current user is
        logged and published as ``None``.
        """
        if self._initialized:
            return
        with self._init_lock:
            if self._initialized or self._disposed:
                return
            self._logger.debug("Initializing authentication status...")
            user: Optional[User] = None
            try:
                user = self._fetch_current_user()
            except AuthApiError as exc:
                if exc.classification is ErrorClassification.UNAUTHENTICATED:
                    self._logger.debug("No authenticated user at startup.")
                else:
                    self._logger.warning(
                        "Failed to get current user during initialization (%s); "
                        "assuming no session.",
                        exc.classification,
                        exc_info=True,
                    )
            except Exception:
                self._logger.error(
                    "Unexpected error during auth initialization; "
                    "assuming no session.",
                    exc_info=True,
                )
            self._publish(user)
            self._initialized = True
            self._logger.debug(
                "Authentication status initialized. User: %s",
                user.id if user is not None else None,
            )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def get_current_user(self) -> Optional[User]:
        """Ask the backend who is signed in and publish the answer.

        Returns ``None`` (and publishes ``None``) when the backend reports
        no session.  Any other failure propagates and publishes nothing,
        so a transient outage never erases a known session.

        Raises:
            AuthApiError: For every classification except ``UNAUTHENTICATED``.
        """
        self._ensure_ready()
        self._logger.debug("Attempting to get current user...")
        try:
            raw = self._executor.execute("GET", self._path("/me"))
        except AuthApiError as exc:
            if exc.classification is ErrorClassification.UNAUTHENTICATED:
                self._logger.debug("No authenticated user found (401).")
                self._publish(None)
                return None
            self._logger.warning(
                "HTTP error while getting current user (%s).",
                exc.classification,
                exc_info=True,
            )
            raise

        with self._publish_lock:
            user = self._decode_or_log(raw, User, "current user")
            self._publish(user)
        self._logger.debug("Successfully fetched current user: %s", user.id)
        return user

    def request_sign_in_code(self, email: str, *, is_dashboard_login: bool = False) -> None:
        """Ask the backend to email a one-time sign-in code.

        Does not change the auth state.

        Raises:
            AuthApiError: Propagated unchanged from the transport.
        """
        self._ensure_ready()
        self._logger.info(
            "Requesting sign-in code for email: %s, dashboard: %s",
            email,
            is_dashboard_login,
            extra={"event": "REQUEST_CODE", "email": email},
        )
        body = RequestCodeRequest(email=email, is_dashboard_login=is_dashboard_login)
        try:
            self._executor.execute(
                "POST",
                self._path("/request-code"),
                body.model_dump(by_alias=True),
            )
        except AuthApiError as exc:
            self._logger.warning(
                "Failed to request sign-in code for %s (%s).",
                email,
                exc.classification,
                exc_info=True,
            )
            raise

    def verify_sign_in_code(
        self,
        email: str,
        code: str,
        *,
        is_dashboard_login: bool = False,
    ) -> AuthSuccessResponse:
        """Exchange an emailed code for a session and publish its user.

        A failed verification leaves the current state untouched.

        Raises:
            AuthApiError: Propagated unchanged from the transport, or
                ``DECODE_ERROR`` for a malformed success body.
        """
        self._ensure_ready()
        self._logger.info(
            "Verifying sign-in code for email: %s",
            email,
            extra={"event": "VERIFY_CODE", "email": email},
        )
        body = VerifyCodeRequest(email=email, code=code, is_dashboard_login=is_dashboard_login)
        try:
            raw = self._executor.execute(
                "POST",
                self._path("/verify-code"),
                body.model_dump(by_alias=True),
            )
        except AuthApiError as exc:
            self._logger.warning(
                "Failed to verify sign-in code for %s (%s).",
                email,
                exc.classification,
                exc_info=True,
            )
            raise

        with self._publish_lock:
            outcome = self._decode_or_log(raw, AuthSuccessResponse, "verify-code response")
            self._publish(outcome.user)
        self._logger.info(
            "Successfully verified code for %s",
            outcome.user.id,
            extra={"event": "SIGN_IN", "user_id": outcome.user.id},
        )
        return outcome

    def sign_in_anonymously(self) -> AuthSuccessResponse:
        """Create an anonymous (guest) session and publish its user.

        Raises:
            AuthApiError: Propagated unchanged from the transport, or
                ``DECODE_ERROR`` for a malformed success body.
        """
        self._ensure_ready()
        self._logger.info("Attempting to sign in anonymously...")
        try:
            raw = self._executor.execute("POST", self._path("/anonymous"), {})
        except AuthApiError as exc:
            self._logger.warning(
                "Failed to sign in anonymously (%s).",
                exc.classification,
                exc_info=True,
            )
            raise

        with self._publish_lock:
            outcome = self._decode_or_log(raw, AuthSuccessResponse, "anonymous sign-in response")
            self._publish(outcome.user)
        self._logger.info(
            "Successfully signed in anonymously. User ID: %s",
            outcome.user.id,
            extra={"event": "ANONYMOUS_SIGN_IN", "user_id": outcome.user.id},
        )
        return outcome

    def sign_out(self) -> None:
        """Notify the backend and clear the local session.

        The local state is always cleared by publishing ``None`` last,
        whatever happened to the backend call.  Never raises.  A no-op
        on a disposed channel.
        """
        if self._disposed:
            self._logger.debug("sign_out on a disposed channel; nothing to clear.")
            return
        self.initialize()
        self._logger.info("Attempting to sign out...")
        try:
            self._executor.execute("POST", self._path("/sign-out"))
        except AuthApiError as exc:
            self._logger.warning(
                "Error during backend sign-out notification (%s).",
                exc.classification,
                exc_info=True,
            )
        except Exception:
            self._logger.error(
                "Unexpected error during backend sign-out notification.",
                exc_info=True,
            )
        finally:
            self._publish(None)
            self._logger.info(
                "Sign-out process complete. Local state cleared.",
                extra={"event": "SIGN_OUT"},
            )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def dispose(self) -> None:
        """Close the auth-state feed permanently.  Safe to call repeatedly."""
        with self._publish_lock:
            if self._disposed:
                return
            self._disposed = True
            self._broadcast.close()
        self._logger.debug("Disposed session channel and closed auth stream.")

    def __enter__(self) -> "SessionStateChannel":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.dispose()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _path(self, endpoint: str) -> str:
        return f"{self._base_path}{endpoint}"

    def _ensure_ready(self) -> None:
        if self._disposed:
            raise SessionChannelClosedError("Session channel has been disposed.")
        self.initialize()

    def _fetch_current_user(self) -> User:
        raw = self._executor.execute("GET", self._path("/me"))
        return decode_envelope(raw, User)

    def _decode_or_log(self, raw: Optional[JsonObject], model: type[M], what: str) -> M:
        try:
            return decode_envelope(raw, model)
        except AuthApiError:
            self._logger.warning("Could not decode %s.", what, exc_info=True)
            raise

    def _publish(self, user: Optional[User]) -> None:
        """Replace the current user and broadcast it.  Dropped after disposal."""
        with self._publish_lock:
            if self._disposed:
                self._logger.debug("Channel disposed; dropping auth state update.")
                return
            self._current_user = user
            self._broadcast.publish(user)
        self._logger.debug(
            "Auth state published: %s",
            user.id if user is not None else None,
        )
