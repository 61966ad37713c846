import logging
import uuid
import pytest

from server_helpers.environments import MissingEnvironmentError, get_optional_env, get_required_env


@pytest.fixture
def env_name(monkeypatch):
    name = f"TEST_ENV_{uuid.uuid4().hex.upper()}"
    monkeypatch.delenv(name, raising=False)
    return name


def test_optional_env_default_when_unset(env_name, caplog):
    with caplog.at_level(logging.INFO, logger="server_helpers.environments"):
        assert get_optional_env(env_name, "mock-default") == "mock-default"
    assert env_name in caplog.text


def test_optional_env_default_when_empty(env_name, monkeypatch):
    monkeypatch.setenv(env_name, "")
    assert get_optional_env(env_name, "mock-default") == "mock-default"


def test_optional_env_value(env_name, monkeypatch):
    monkeypatch.setenv(env_name, "real-value")
    assert get_optional_env(env_name, "mock-default") == "real-value"


def test_required_env_raises_when_unset(env_name):
    with pytest.raises(MissingEnvironmentError) as exc:
        get_required_env(env_name)
    assert exc.value.name == env_name
    assert str(exc.value) == f"PLEASE SET {env_name} ENVIRONMENT VARIABLE"


def test_required_env_raises_when_empty(env_name, monkeypatch):
    monkeypatch.setenv(env_name, "")
    with pytest.raises(MissingEnvironmentError):
        get_required_env(env_name)


def test_required_env_value(env_name, monkeypatch):
    monkeypatch.setenv(env_name, "real-value")
    assert get_required_env(env_name) == "real-value"
