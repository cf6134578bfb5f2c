"""Settings - environment parsing and fail-fast validation.

Tests cover:
    - Missing JWT_SECRET aborts settings construction
    - Out-of-range compression level / timeout rejected
    - Malformed cron expression rejected
    - postgresql:// URLs upgraded to the asyncpg driver
    - Derived properties (timeout seconds, slowapi limit string)
"""

import pytest
from pydantic import ValidationError

from app.config import Settings


def _settings(**kwargs) -> Settings:
    return Settings(_env_file=None, **kwargs)


def test_missing_jwt_secret_fails(monkeypatch):
    monkeypatch.delenv("JWT_SECRET", raising=False)
    with pytest.raises(ValidationError) as info:
        _settings()
    assert "jwt_secret" in str(info.value)


def test_short_jwt_secret_fails():
    with pytest.raises(ValidationError):
        _settings(jwt_secret="short")


@pytest.mark.parametrize("level", [0, 10])
def test_compression_level_out_of_range(level):
    with pytest.raises(ValidationError):
        _settings(compression_level=level)


def test_timeout_must_be_positive():
    with pytest.raises(ValidationError):
        _settings(request_timeout_ms=0)


def test_malformed_cron_rejected():
    with pytest.raises(ValidationError):
        _settings(cron_deactivate_dormant_users="0 3 * *")


def test_unknown_log_format_rejected():
    with pytest.raises(ValidationError):
        _settings(log_format="xml")


def test_env_values_are_read(monkeypatch):
    monkeypatch.setenv("REQUEST_TIMEOUT_MS", "2500")
    monkeypatch.setenv("COMPRESSION_LEVEL", "9")
    settings = _settings()
    assert settings.request_timeout_seconds == 2.5
    assert settings.compression_level == 9


def test_postgres_url_upgraded_to_asyncpg():
    settings = _settings(database_url="postgresql://u:p@host:5432/db")
    assert settings.database_url == "postgresql+asyncpg://u:p@host:5432/db"


def test_rate_limit_string():
    settings = _settings(rate_limit_max=5, rate_limit_window_seconds=60)
    assert settings.rate_limit == "5/60 seconds"
