import pytest

from staking_reporter.errors import MissingEnvironmentVariableException, RetrievalFailureError
from staking_reporter.queries import BlocksRange, calc_block_ranges, retry_query
from staking_reporter.queries import common


@pytest.mark.parametrize(
    "range_size, start, end, expected",
    [
        (10, 0, 25, [(0, 9), (10, 19), (20, 25)]),
        (10, 0, 19, [(0, 9), (10, 19)]),
        (10, 5, 5, [(5, 5)]),
        (1_000_000, 7669478, 7669500, [(7669478, 7669500)]),
        (10, 6, 5, []),
    ],
)
def test_calc_block_ranges(range_size, start, end, expected):
    ranges = calc_block_ranges(range_size, start, end)
    assert ranges == [BlocksRange(*r) for r in expected]


def test_block_ranges_are_disjoint_and_cover_everything():
    ranges = calc_block_ranges(7, 100, 200)

    assert ranges[0].from_block == 100
    assert ranges[-1].to_block == 200
    for current, following in zip(ranges, ranges[1:]):
        assert following.from_block == current.to_block + 1


@pytest.fixture
def sleeps(monkeypatch) -> list[float]:
    waits: list[float] = []
    monkeypatch.setattr(common.time, "sleep", lambda s: waits.append(s))
    return waits


def flaky(failures: int, result):
    calls = {"count": 0}

    def query():
        calls["count"] += 1
        if calls["count"] <= failures:
            raise ConnectionError("node unavailable")
        return result

    return query, calls


def test_retry_query_recovers(sleeps):
    query, calls = flaky(2, "ok")

    assert retry_query(query, "flaky") == "ok"
    assert calls["count"] == 3
    assert sleeps == [0.5, 1.0]


def test_retry_query_backoff_is_capped(sleeps):
    query, _ = flaky(9, "ok")

    retry_query(query, "flaky", max_retries=10)
    assert max(sleeps) == common.MAX_BACKOFF_SECONDS


def test_retry_query_gives_up(sleeps):
    query, calls = flaky(100, "ok")

    with pytest.raises(RetrievalFailureError, match="failed with 3 attempts"):
        retry_query(query, "flaky", max_retries=3)
    assert calls["count"] == 3


def test_missing_env_is_not_retried(sleeps):
    def query():
        raise MissingEnvironmentVariableException("RPC_URL")

    with pytest.raises(MissingEnvironmentVariableException):
        retry_query(query, "no env")
    assert sleeps == []


def test_resolve_snapshot_block(monkeypatch):
    monkeypatch.setattr(common, "get_latest_block", lambda: 1234)

    assert common.resolve_snapshot_block("latest") == 1234
    assert common.resolve_snapshot_block(99) == 99
