"""Tests for the bounded-concurrency version collection pipeline."""

from __future__ import annotations

import pytest

from check_versions import core
from check_versions.config import Settings
from check_versions.core import check_versions, collect_versions
from check_versions.models import Resolution, VersionResult


def test_results_follow_input_order_when_completion_is_reversed(
    fake_fetcher, lockfile_v2
) -> None:
    repos = [f"acme/repo-{i}" for i in range(8)]
    payloads = {repo: lockfile_v2("foo", f"1.0.{i}") for i, repo in enumerate(repos)}
    # Earlier repositories take longest, so they complete last.
    delays = {repo: 0.02 * (len(repos) - i) for i, repo in enumerate(repos)}
    fetcher = fake_fetcher(payloads, delays)

    report = collect_versions(repos, "foo", fetcher, concurrency=8)

    assert len(report) == len(repos)
    assert report.repositories == repos
    assert [entry.index for entry in report] == list(range(len(repos)))
    assert [entry.result.version for entry in report] == [f"1.0.{i}" for i in range(8)]


@pytest.mark.parametrize("limit", [1, 2, 5])
def test_never_more_than_limit_fetches_in_flight(fake_fetcher, lockfile_v1, limit: int) -> None:
    repos = [f"acme/repo-{i}" for i in range(12)]
    payloads = {repo: lockfile_v1("foo", "1.0.0") for repo in repos}
    fetcher = fake_fetcher(payloads, {repo: 0.01 for repo in repos})

    report = collect_versions(repos, "foo", fetcher, concurrency=limit)

    assert fetcher.max_in_flight <= limit
    assert sorted(fetcher.calls) == sorted(repos)
    assert len(report) == len(repos)


def test_limit_is_reached_when_enough_work_is_queued(fake_fetcher, lockfile_v1) -> None:
    repos = [f"acme/repo-{i}" for i in range(6)]
    payloads = {repo: lockfile_v1("foo", "1.0.0") for repo in repos}
    fetcher = fake_fetcher(payloads, {repo: 0.1 for repo in repos})

    collect_versions(repos, "foo", fetcher, concurrency=3)

    assert fetcher.max_in_flight == 3


def test_transport_error_is_isolated_to_its_repository(
    fake_fetcher, lockfile_v1, lockfile_v2, transport_error
) -> None:
    repos = ["acme/web", "acme/down", "acme/api", "acme/docs"]
    fetcher = fake_fetcher(
        {
            "acme/web": lockfile_v1("foo", "1.2.3"),
            "acme/down": transport_error("acme/down"),
            "acme/api": lockfile_v2("foo", "2.0.0"),
            "acme/docs": lockfile_v2("bar", "9.9.9"),
        }
    )

    report = collect_versions(repos, "foo", fetcher, concurrency=4)

    results = [entry.result for entry in report]
    assert results[0] == VersionResult.found("1.2.3")
    assert results[1].resolution is Resolution.UNREADABLE
    assert "connection reset" in results[1].detail
    assert results[2] == VersionResult.found("2.0.0")
    assert results[3] == VersionResult.not_found()
    assert report.failures == []


def test_unexpected_task_failure_becomes_failed_entry(
    fake_fetcher, lockfile_v1, caplog: pytest.LogCaptureFixture
) -> None:
    repos = ["acme/web", "acme/broken", "acme/api"]
    fetcher = fake_fetcher(
        {
            "acme/web": lockfile_v1("foo", "1.0.0"),
            "acme/broken": KeyError("boom"),
            "acme/api": lockfile_v1("foo", "1.1.0"),
        }
    )

    report = collect_versions(repos, "foo", fetcher, concurrency=2)

    assert len(report) == 3
    broken = report.entries[1]
    assert broken.failed
    assert broken.result is None
    assert "KeyError" in broken.error
    assert [entry.repository for entry in report.resolved] == ["acme/web", "acme/api"]
    assert report.totals["failed"] == 1
    assert "acme/broken" in caplog.text


def test_missing_lockfile_is_not_found(fake_fetcher) -> None:
    fetcher = fake_fetcher({"acme/empty": None})

    report = collect_versions(["acme/empty"], "foo", fetcher)

    assert report.entries[0].result == VersionResult.not_found()


def test_duplicate_repositories_get_independent_slots(fake_fetcher, lockfile_v1) -> None:
    fetcher = fake_fetcher({"acme/web": lockfile_v1("foo", "1.0.0")})

    report = collect_versions(["acme/web", "acme/web"], "foo", fetcher)

    assert len(report) == 2
    assert fetcher.calls == ["acme/web", "acme/web"]
    assert [entry.index for entry in report] == [0, 1]


def test_empty_input_yields_empty_report(fake_fetcher) -> None:
    report = collect_versions([], "foo", fake_fetcher({}))

    assert len(report) == 0
    assert report.totals["repositories"] == 0


def test_same_inputs_give_same_output(fake_fetcher, lockfile_v1, lockfile_v2) -> None:
    repos = ["acme/a", "acme/b", "acme/c"]
    payloads = {
        "acme/a": lockfile_v1("foo", "1.0.0"),
        "acme/b": b"not json",
        "acme/c": lockfile_v2("foo", "3.0.0"),
    }

    first = collect_versions(repos, "foo", fake_fetcher(payloads), concurrency=2)
    second = collect_versions(repos, "foo", fake_fetcher(payloads), concurrency=3)

    assert first == second


def test_concurrency_below_one_is_rejected(fake_fetcher) -> None:
    with pytest.raises(ValueError):
        collect_versions(["acme/a"], "foo", fake_fetcher({}), concurrency=0)


def test_check_versions_wires_settings_into_fetcher(monkeypatch, lockfile_v1) -> None:
    seen: dict[str, object] = {}

    class _Session:
        closed = False

        def close(self) -> None:
            self.closed = True

    session = _Session()

    class _Fetcher:
        def __init__(self, sess, settings) -> None:
            seen["session"] = sess
            seen["settings"] = settings

        def fetch(self, repository: str) -> bytes:
            return lockfile_v1("foo", "4.5.6")

    monkeypatch.setattr(core, "build_session", lambda settings: session)
    monkeypatch.setattr(core, "LockfileFetcher", _Fetcher)
    settings = Settings(token="t0k3n", concurrency=4)

    report = check_versions(["acme/web"], "foo", settings)

    assert report.entries[0].result == VersionResult.found("4.5.6")
    assert seen == {"session": session, "settings": settings}
    assert session.closed


def test_unparseable_payload_stays_a_table_row(fake_fetcher, lockfile_v1) -> None:
    deep = b'{"packages": {}, "x": ' + b"[" * 100000 + b"]" * 100000 + b"}"
    fetcher = fake_fetcher({"acme/deep": deep, "acme/web": lockfile_v1("foo", "1.0.0")})

    report = collect_versions(["acme/deep", "acme/web"], "foo", fetcher)

    assert report.failures == []
    assert report.entries[0].result.resolution is Resolution.UNREADABLE
    assert report.entries[1].result == VersionResult.found("1.0.0")
