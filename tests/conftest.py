from __future__ import annotations

import json
import threading
import time
from collections.abc import Callable, Iterator

import pytest

from check_versions.fetcher import FetchError
from check_versions.logging import reset_logging


def v1_lockfile(package: str, version: str) -> bytes:
    return json.dumps(
        {"lockfileVersion": 1, "dependencies": {package: {"version": version}}}
    ).encode("utf-8")


def v2_lockfile(package: str, version: str) -> bytes:
    return json.dumps(
        {
            "lockfileVersion": 3,
            "packages": {
                "": {"name": "app"},
                f"node_modules/{package}": {"version": version},
            },
        }
    ).encode("utf-8")


class FakeFetcher:
    """In-memory fetcher recording how many fetches overlap."""

    def __init__(
        self,
        payloads: dict[str, bytes | None | Exception],
        delays: dict[str, float] | None = None,
    ) -> None:
        self.payloads = payloads
        self.delays = delays or {}
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def fetch(self, repository: str) -> bytes | None:
        with self._lock:
            self.calls.append(repository)
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            time.sleep(self.delays.get(repository, 0.0))
            payload = self.payloads[repository]
            if isinstance(payload, Exception):
                raise payload
            return payload
        finally:
            with self._lock:
                self.in_flight -= 1


@pytest.fixture
def fake_fetcher() -> Callable[..., FakeFetcher]:
    """Build a FakeFetcher from a repository -> payload mapping."""
    return FakeFetcher


@pytest.fixture
def transport_error() -> Callable[[str], FetchError]:
    def _make(repository: str) -> FetchError:
        return FetchError(repository, ConnectionError("connection reset by peer"))

    return _make


@pytest.fixture(autouse=True)
def _no_token_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "GHP_TOKEN",
        "GITHUB_TOKEN",
        "CHECK_VERSIONS_API_URL",
        "CHECK_VERSIONS_CONCURRENCY",
        "CHECK_VERSIONS_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def lockfile_v1() -> Callable[[str, str], bytes]:
    return v1_lockfile


@pytest.fixture
def lockfile_v2() -> Callable[[str, str], bytes]:
    return v2_lockfile


@pytest.fixture(autouse=True)
def _reset_package_logger() -> Iterator[None]:
    """Undo configure_logging so caplog keeps seeing package records."""
    yield
    reset_logging()
