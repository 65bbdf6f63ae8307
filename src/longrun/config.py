"""Configuration: frozen polling settings with one canonical default."""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import Literal

from dotenv import load_dotenv

from longrun.errors import ConfigurationError
from longrun.retry import RetryPolicy

PollStrategy = Literal["wait", "get"]

_STRATEGIES: tuple[PollStrategy, ...] = ("wait", "get")

#: Smallest accepted get-style sleep, in seconds.
MIN_POLL_INTERVAL_S = 0.1


@dataclass(frozen=True)
class PollingConfig:
    """Immutable polling configuration.

    Example:
        config = PollingConfig(strategy="get", poll_interval_s=0.25)
    """

    #: ``"wait"`` blocks server-side per call; ``"get"`` polls with a local sleep.
    strategy: PollStrategy = "wait"
    #: Sleep between non-terminal get-style snapshots.
    poll_interval_s: float = 0.1
    #: Per-attempt timeout hint used by the default-cadence variant.
    default_wait_timeout_s: float | None = None
    #: Overall bound on a single polling loop; None means unbounded.
    deadline_s: float | None = None
    retry: RetryPolicy = field(default_factory=RetryPolicy)

    def __post_init__(self) -> None:
        """Validate configuration early for clear errors."""
        if self.strategy not in _STRATEGIES:
            raise ConfigurationError(
                f"Unknown poll strategy: {self.strategy!r}",
                hint="Supported strategies: 'wait', 'get'",
            )
        if self.poll_interval_s < MIN_POLL_INTERVAL_S:
            raise ConfigurationError(
                f"poll_interval_s must be ≥ {MIN_POLL_INTERVAL_S}, "
                f"got {self.poll_interval_s}",
                hint="This is the sleep between get-style polls; 0.1-0.5 s is typical.",
            )
        if self.default_wait_timeout_s is not None and self.default_wait_timeout_s <= 0:
            raise ConfigurationError(
                f"default_wait_timeout_s must be > 0, got {self.default_wait_timeout_s}",
                hint="Pass None to let the server pick its own wait window.",
            )
        if self.deadline_s is not None and self.deadline_s <= 0:
            raise ConfigurationError(
                f"deadline_s must be > 0, got {self.deadline_s}",
                hint="Pass None to poll until the operation finishes.",
            )

    @classmethod
    def from_env(cls) -> PollingConfig:
        """Build a config from ``LONGRUN_*`` environment variables (and ``.env``).

        Recognized: ``LONGRUN_STRATEGY``, ``LONGRUN_POLL_INTERVAL_S``,
        ``LONGRUN_WAIT_TIMEOUT_S``, ``LONGRUN_DEADLINE_S``,
        ``LONGRUN_MAX_RETRIES``, ``LONGRUN_INITIAL_DELAY_S``.
        """
        load_dotenv()
        defaults = cls()
        retry = RetryPolicy(
            max_retries=_env_int("LONGRUN_MAX_RETRIES", defaults.retry.max_retries),
            initial_delay_s=_env_float(
                "LONGRUN_INITIAL_DELAY_S", defaults.retry.initial_delay_s
            ),
        )
        return cls(
            strategy=os.environ.get("LONGRUN_STRATEGY", defaults.strategy),  # type: ignore[arg-type]
            poll_interval_s=_env_float(
                "LONGRUN_POLL_INTERVAL_S", defaults.poll_interval_s
            ),
            default_wait_timeout_s=_env_float(
                "LONGRUN_WAIT_TIMEOUT_S", defaults.default_wait_timeout_s
            ),
            deadline_s=_env_float("LONGRUN_DEADLINE_S", defaults.deadline_s),
            retry=retry,
        )


def _env_float(name: str, default: float | None) -> float | None:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(
            f"{name} must be a number, got {raw!r}",
            hint=f"Unset {name} or set it to a value like '0.5'.",
        ) from exc


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(
            f"{name} must be an integer, got {raw!r}",
            hint=f"Unset {name} or set it to a value like '3'.",
        ) from exc
