"""
Services Package.

The ``create_services()`` factory wires configuration, logging, the HTTP
transport and the session channel together, returning a typed dict
that the application layer can consume without knowing the internal
dependency graph.
"""

from __future__ import annotations

from typing import Optional, TypedDict

from auth_api.config import AppConfig, get_config
from auth_api.http_client import HttpRequestExecutor, TokenProvider
from auth_api.logger import get_logger
from auth_api.services.session_channel import SessionStateChannel


class ServiceContainer(TypedDict):
    """Typed container for the wired services."""

    config: AppConfig
    executor: HttpRequestExecutor
    session_channel: SessionStateChannel


def create_services(
    config: Optional[AppConfig] = None,
    *,
    token_provider: Optional[TokenProvider] = None,
) -> ServiceContainer:
    """
    Wire the transport and the session channel together.

    This is the single composition root.  The application calls it once
    at startup and disposes ``session_channel`` / closes ``executor`` on
    shutdown.

    Args:
        config: Application configuration; the cached singleton when omitted.
        token_provider: Callable returning the stored session token, used
            by the transport for bearer authentication.

    Returns:
        ServiceContainer mapping service names to fully-wired instances.
    """
    resolved_config = config if config is not None else get_config()

    executor = HttpRequestExecutor(
        base_url=resolved_config.AUTH_API_BASE_URL,
        logger=get_logger("auth_api.http"),
        timeout_s=resolved_config.HTTP_TIMEOUT_S,
        token_provider=token_provider,
    )
    session_channel = SessionStateChannel(
        executor=executor,
        logger=get_logger("auth_api.session"),
        base_path=resolved_config.AUTH_BASE_PATH,
    )

    return ServiceContainer(
        config=resolved_config,
        executor=executor,
        session_channel=session_channel,
    )
