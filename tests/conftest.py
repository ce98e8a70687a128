"""
Pytest config.

Puts the repo root on ``sys.path`` so ``import auth_api`` works without an
install, isolates configuration from any local ``.env``, and provides a
scriptable fake transport plus a session channel fixture.
"""

from __future__ import annotations

import io
import sys
import threading
import uuid
from collections import deque
from pathlib import Path
from typing import Any, Callable, Optional, Union

import pytest


def _ensure_repo_root_on_syspath() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    repo_root_str = str(repo_root)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


_ensure_repo_root_on_syspath()

from auth_api.config import reset_config  # noqa: E402
from auth_api.exceptions import AuthApiError  # noqa: E402
from auth_api.logger import StructuredLogger  # noqa: E402
from auth_api.models.enums import ErrorClassification  # noqa: E402
from auth_api.services.session_channel import SessionStateChannel  # noqa: E402

Reply = Union[dict[str, Any], None, BaseException, Callable[[], Any]]


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Run every test against defaults, not a developer's ``.env``."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("AUTH_API_BASE_URL", "https://auth.test")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    reset_config()
    yield
    reset_config()


class FakeExecutor:
    """In-memory ``RequestExecutor``.

    Replies are scripted per ``(method, path)`` and consumed in order; the
    last scripted reply for a route is reused once the queue runs dry.  A
    reply is a JSON body, ``None``, an exception to raise, or a callable
    producing one of those.
    """

    def __init__(self) -> None:
        self._replies: dict[tuple[str, str], deque[Reply]] = {}
        self._last: dict[tuple[str, str], Reply] = {}
        self._lock = threading.Lock()
        self.calls: list[tuple[str, str, Optional[dict[str, Any]]]] = []

    def script(self, method: str, path: str, *replies: Reply) -> "FakeExecutor":
        self._replies.setdefault((method, path), deque()).extend(replies)
        return self

    def execute(
        self,
        method: str,
        path: str,
        body: Optional[dict[str, Any]] = None,
    ) -> Optional[dict[str, Any]]:
        key = (method, path)
        with self._lock:
            self.calls.append((method, path, body))
            queue = self._replies.get(key)
            if queue:
                reply = queue.popleft()
                self._last[key] = reply
            elif key in self._last:
                reply = self._last[key]
            else:
                raise AssertionError(f"Unscripted call: {method} {path}")
        if callable(reply) and not isinstance(reply, BaseException):
            reply = reply()
        if isinstance(reply, BaseException):
            raise reply
        return reply

    def paths(self) -> list[str]:
        return [path for _, path, _ in self.calls]


def user_payload(user_id: str, app_role: str = "standardUser", **extra: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": user_id,
        "email": f"{user_id}@example.com",
        "appRole": app_role,
        "dashboardRole": "none",
    }
    payload.update(extra)
    return payload


def envelope(data: Any) -> dict[str, Any]:
    return {"data": data, "metadata": {"requestId": "req-1", "timestamp": "2024-01-01T00:00:00Z"}}


def auth_error(classification: ErrorClassification, status_code: Optional[int] = None) -> AuthApiError:
    return AuthApiError(classification, f"{classification.value} failure", status_code=status_code)


ME = "/api/v1/auth/me"
REQUEST_CODE = "/api/v1/auth/request-code"
VERIFY_CODE = "/api/v1/auth/verify-code"
ANONYMOUS = "/api/v1/auth/anonymous"
SIGN_OUT = "/api/v1/auth/sign-out"


@pytest.fixture
def executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def logger() -> StructuredLogger:
    return StructuredLogger(name=f"auth_api.test.{uuid.uuid4().hex}", stream=io.StringIO())


@pytest.fixture
def channel(executor: FakeExecutor, logger: StructuredLogger):
    ch = SessionStateChannel(executor=executor, logger=logger)
    yield ch
    ch.dispose()
