from __future__ import annotations

import io
import json
import logging
import sys

import pytest
from pydantic import ValidationError

from auth_api.config import AppConfig, get_config, reset_config
from auth_api.http_client import HttpRequestExecutor
from auth_api.logger import JSONFormatter, StructuredLogger
from auth_api.services import create_services
from auth_api.services.session_channel import SessionStateChannel


def test_config_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("AUTH_API_BASE_URL", "https://api.example.com")
    monkeypatch.setenv("HTTP_TIMEOUT_S", "2.5")
    reset_config()

    cfg = get_config()

    assert cfg.AUTH_API_BASE_URL == "https://api.example.com"
    assert cfg.HTTP_TIMEOUT_S == 2.5
    assert cfg.AUTH_BASE_PATH == "/api/v1/auth"
    assert get_config() is cfg


def test_config_loads_dotenv(tmp_path, monkeypatch) -> None:
    monkeypatch.delenv("AUTH_API_BASE_URL", raising=False)
    (tmp_path / ".env").write_text("AUTH_API_BASE_URL=https://from-dotenv.test\n", encoding="utf-8")

    assert AppConfig().AUTH_API_BASE_URL == "https://from-dotenv.test"


def test_config_rejects_relative_base_path() -> None:
    with pytest.raises(ValidationError):
        AppConfig(AUTH_BASE_PATH="api/v1/auth")


def test_config_warns_on_missing_base_url(monkeypatch, caplog) -> None:
    monkeypatch.delenv("AUTH_API_BASE_URL", raising=False)

    with caplog.at_level(logging.WARNING, logger="auth_api.config"):
        AppConfig()

    assert any("AUTH_API_BASE_URL is empty" in r.getMessage() for r in caplog.records)


def test_log_level_resolution() -> None:
    assert AppConfig(LOG_LEVEL="warning").log_level == logging.WARNING
    assert AppConfig(LOG_LEVEL="chatty").log_level == logging.INFO


def test_structured_logger_emits_json() -> None:
    stream = io.StringIO()
    log = StructuredLogger(name="auth_api.test.json", level=logging.INFO, stream=stream)

    log.info("Signed in %s", "u1", extra={"event": "SIGN_IN"})

    entry = json.loads(stream.getvalue().strip().splitlines()[-1])
    assert entry["message"] == "Signed in u1"
    assert entry["level"] == "INFO"
    assert entry["logger_name"] == "auth_api.test.json"
    assert entry["extra"] == {"event": "SIGN_IN"}


def test_json_formatter_includes_exception() -> None:
    try:
        raise ValueError("bad")
    except ValueError:
        record = logging.getLogger("x").makeRecord(
            "x", logging.ERROR, __file__, 1, "failed", (), exc_info=sys.exc_info()
        )

    entry = json.loads(JSONFormatter().format(record))

    assert "ValueError: bad" in entry["exception"]


def test_json_formatter_masks_credentials() -> None:
    stream = io.StringIO()
    log = StructuredLogger(name="auth_api.test.redact", level=logging.INFO, stream=stream)

    log.info("Stored session", extra={"token": "jwt-secret", "Code": "123456", "user_id": "u1"})

    line = stream.getvalue().strip().splitlines()[-1]
    entry = json.loads(line)
    assert entry["extra"] == {"token": "***", "Code": "***", "user_id": "u1"}
    assert "jwt-secret" not in line
    assert "123456" not in line


def test_structured_logger_writes_log_file(tmp_path) -> None:
    log_file = tmp_path / "logs" / "auth.log"
    log = StructuredLogger(
        name="auth_api.test.file",
        level=logging.INFO,
        stream=io.StringIO(),
        log_file=str(log_file),
    )

    log.warning("disk check")
    for handler in logging.getLogger("auth_api.test.file").handlers:
        handler.flush()

    assert "disk check" in log_file.read_text(encoding="utf-8")


def test_create_services_wires_channel() -> None:
    cfg = AppConfig(AUTH_API_BASE_URL="https://auth.test", AUTH_BASE_PATH="/auth")

    services = create_services(cfg, token_provider=lambda: "tok")

    try:
        assert services["config"] is cfg
        assert isinstance(services["executor"], HttpRequestExecutor)
        assert isinstance(services["session_channel"], SessionStateChannel)
        assert not services["session_channel"].is_initialized
    finally:
        services["session_channel"].dispose()
        services["executor"].close()
