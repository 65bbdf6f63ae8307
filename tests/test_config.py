from __future__ import annotations

import pytest

from longrun.config import PollingConfig
from longrun.errors import ConfigurationError
from longrun.retry import RetryPolicy

pytestmark = pytest.mark.unit


def test_defaults() -> None:
    config = PollingConfig()
    assert config.strategy == "wait"
    assert config.poll_interval_s == 0.1
    assert config.default_wait_timeout_s is None
    assert config.deadline_s is None
    assert config.retry == RetryPolicy()


def test_config_is_frozen() -> None:
    config = PollingConfig()
    with pytest.raises(AttributeError):
        config.strategy = "get"  # type: ignore[misc]


@pytest.mark.parametrize(
    ("kwargs", "fragment"),
    [
        ({"strategy": "stream"}, "strategy"),
        ({"poll_interval_s": -1.0}, "poll_interval_s"),
        ({"poll_interval_s": 0}, "poll_interval_s"),
        ({"poll_interval_s": 0.05}, "poll_interval_s"),
        ({"default_wait_timeout_s": 0}, "default_wait_timeout_s"),
        ({"deadline_s": -5}, "deadline_s"),
    ],
)
def test_invalid_values_raise_with_hint(kwargs, fragment) -> None:
    with pytest.raises(ConfigurationError, match=fragment) as excinfo:
        PollingConfig(**kwargs)
    assert excinfo.value.hint


def test_from_env_reads_longrun_variables(monkeypatch) -> None:
    monkeypatch.setenv("LONGRUN_STRATEGY", "get")
    monkeypatch.setenv("LONGRUN_POLL_INTERVAL_S", "0.25")
    monkeypatch.setenv("LONGRUN_WAIT_TIMEOUT_S", "4")
    monkeypatch.setenv("LONGRUN_DEADLINE_S", "120")
    monkeypatch.setenv("LONGRUN_MAX_RETRIES", "5")
    monkeypatch.setenv("LONGRUN_INITIAL_DELAY_S", "1.5")

    config = PollingConfig.from_env()

    assert config.strategy == "get"
    assert config.poll_interval_s == 0.25
    assert config.default_wait_timeout_s == 4.0
    assert config.deadline_s == 120.0
    assert config.retry.max_retries == 5
    assert config.retry.initial_delay_s == 1.5


def test_from_env_without_variables_matches_defaults() -> None:
    assert PollingConfig.from_env() == PollingConfig()


def test_from_env_rejects_non_numeric(monkeypatch) -> None:
    monkeypatch.setenv("LONGRUN_POLL_INTERVAL_S", "fast")
    with pytest.raises(ConfigurationError, match="LONGRUN_POLL_INTERVAL_S"):
        PollingConfig.from_env()


def test_minimum_poll_interval_is_accepted() -> None:
    assert PollingConfig(poll_interval_s=0.1).poll_interval_s == 0.1


def test_from_env_rejects_zero_poll_interval(monkeypatch) -> None:
    monkeypatch.setenv("LONGRUN_POLL_INTERVAL_S", "0")
    with pytest.raises(ConfigurationError, match="poll_interval_s"):
        PollingConfig.from_env()


def test_from_env_loads_dotenv(monkeypatch) -> None:
    loaded: list[bool] = []
    monkeypatch.setattr("longrun.config.load_dotenv", lambda: loaded.append(True))

    PollingConfig.from_env()

    assert loaded == [True]
