import pytest

from reorder.config import ACCESS_TTL_DEFAULT, REFRESH_TTL_DEFAULT, load_settings
from reorder.errors import ConfigError


@pytest.fixture
def env(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", "config-access-secret")
    monkeypatch.setenv("JWT_REFRESH_SECRET", "config-refresh-secret")
    for name in ("ACCESS_TOKEN_TTL_SECONDS", "REFRESH_TOKEN_TTL_SECONDS", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(env):
    settings = load_settings()
    assert settings.jwt_secret == "config-access-secret"
    assert settings.jwt_refresh_secret == "config-refresh-secret"
    assert settings.access_token_ttl == ACCESS_TTL_DEFAULT
    assert settings.refresh_token_ttl == REFRESH_TTL_DEFAULT
    assert settings.access_token_ttl < settings.refresh_token_ttl
    assert settings.log_level == "INFO"


@pytest.mark.parametrize("missing", ["JWT_SECRET", "JWT_REFRESH_SECRET"])
def test_missing_secret_is_fatal(env, missing):
    env.setenv(missing, "")
    with pytest.raises(ConfigError):
        load_settings()


def test_secrets_must_differ(env):
    env.setenv("JWT_REFRESH_SECRET", "config-access-secret")
    with pytest.raises(ConfigError):
        load_settings()


@pytest.mark.parametrize("value", ["soon", "0", "-5"])
def test_bad_ttl(env, value):
    env.setenv("ACCESS_TOKEN_TTL_SECONDS", value)
    with pytest.raises(ConfigError):
        load_settings()


def test_ttl_override(env):
    env.setenv("ACCESS_TOKEN_TTL_SECONDS", "300")
    env.setenv("LOG_LEVEL", "debug")
    settings = load_settings()
    assert settings.access_token_ttl == 300
    assert settings.log_level == "DEBUG"
