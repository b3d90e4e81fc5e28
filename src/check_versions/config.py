"""Runtime settings for a version check run.

The API credential is read from the environment exactly once, before any
request is dispatched. A missing credential is a fatal startup error.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass


DEFAULT_API_URL = "https://api.github.com"
DEFAULT_CONCURRENCY = 64
DEFAULT_TIMEOUT = 30.0

TOKEN_ENV_VARS = ("GHP_TOKEN", "GITHUB_TOKEN")
API_URL_ENV_VAR = "CHECK_VERSIONS_API_URL"
CONCURRENCY_ENV_VAR = "CHECK_VERSIONS_CONCURRENCY"
TIMEOUT_ENV_VAR = "CHECK_VERSIONS_TIMEOUT"


class ConfigError(RuntimeError):
    """Raised when the run cannot start because of missing or invalid settings."""


@dataclass(slots=True, frozen=True)
class Settings:
    """Settings shared by every request of a run."""

    token: str
    api_url: str = DEFAULT_API_URL
    concurrency: int = DEFAULT_CONCURRENCY
    timeout: float | None = DEFAULT_TIMEOUT
    ref: str | None = None

    def __post_init__(self) -> None:
        if not self.token:
            raise ConfigError("API token must be non-empty")
        if not self.api_url:
            raise ConfigError("API URL must be non-empty")
        if self.concurrency < 1:
            raise ConfigError(f"Concurrency must be at least 1, got {self.concurrency}")
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigError(f"Timeout must be positive, got {self.timeout}")

    def __repr__(self) -> str:
        return (
            f"Settings(token='***', api_url={self.api_url!r}, "
            f"concurrency={self.concurrency}, timeout={self.timeout}, ref={self.ref!r})"
        )


def read_token(environ: Mapping[str, str] | None = None) -> str:
    """Return the API token from the first populated token variable.

    Raises:
        ConfigError: If none of the token variables is set.
    """
    env = os.environ if environ is None else environ
    for name in TOKEN_ENV_VARS:
        token = env.get(name, "").strip()
        if token:
            return token
    names = " or ".join(TOKEN_ENV_VARS)
    raise ConfigError(f"Please export {names} with read access to the repositories")


def _env_int(env: Mapping[str, str], name: str) -> int | None:
    raw = env.get(name, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


def _env_float(env: Mapping[str, str], name: str) -> float | None:
    raw = env.get(name, "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc


def load_settings(
    *,
    concurrency: int | None = None,
    timeout: float | None = None,
    api_url: str | None = None,
    ref: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Build settings from explicit arguments, falling back to the environment.

    Priority for every value:
    1. Explicit argument
    2. CHECK_VERSIONS_* environment variable
    3. Built-in default

    Raises:
        ConfigError: If the token is missing or a value is invalid.
    """
    env = os.environ if environ is None else environ
    token = read_token(env)

    if concurrency is None:
        concurrency = _env_int(env, CONCURRENCY_ENV_VAR)
    if timeout is None:
        timeout = _env_float(env, TIMEOUT_ENV_VAR)
    if api_url is None:
        api_url = env.get(API_URL_ENV_VAR, "").strip() or None

    return Settings(
        token=token,
        api_url=(api_url or DEFAULT_API_URL).rstrip("/"),
        concurrency=DEFAULT_CONCURRENCY if concurrency is None else concurrency,
        timeout=DEFAULT_TIMEOUT if timeout is None else timeout,
        ref=ref or None,
    )
