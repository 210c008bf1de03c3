from unittest.mock import Mock

import pytest

from staking_reporter.errors import RetrievalFailureError
from staking_reporter.models import Config, EventKind
from staking_reporter.queries import (
    BlocksRange,
    build_covalent_params,
    get_stake_events_covalent,
    parse_covalent_items,
)
from staking_reporter.queries import common, covalent
from staking_reporter.test.conftest import MockResponse, read_stub

EMPTY_PAGE = {"data": {"items": []}, "error": False}


@pytest.fixture(autouse=True)
def covalent_env(monkeypatch):
    monkeypatch.setenv("COVALENTHQ_BASE_URL", "https://api.covalenthq.com/v1")
    monkeypatch.setenv("COVALENTHQ_API_KEY", "ckey_test")
    monkeypatch.setattr(common.time, "sleep", lambda _: None)


def test_parse_covalent_items(ADDRESSES):
    items = read_stub("events/covalent-page.json")["data"]["items"]
    events = parse_covalent_items(items)

    assert [e.account for e in events] == [ADDRESSES[0], ADDRESSES[1]]
    assert events[0].kind == EventKind.STAKE_ADDED
    assert events[0].value == 100 * 10**18
    assert events[0].timestamp == 1640995200
    assert events[0].block_number == 8900000
    assert events[0].log_index == 7
    assert events[1].timestamp == 1641600000


def test_build_params(config: Config):
    params = build_covalent_params(config, BlocksRange(10, 20), 3)

    assert params["sender-address"] == config.staking_address
    assert params["starting-block"] == 10
    assert params["ending-block"] == 20
    assert params["page-size"] == config.page_size
    assert params["page-number"] == 3
    assert params["key"] == "ckey_test"


def test_url(config: Config):
    url = covalent.build_covalent_url(config, EventKind.STAKE_ADDED)

    assert url.startswith("https://api.covalenthq.com/v1/43114/events/topics/0x")
    assert url.endswith("/")


def test_pagination(monkeypatch, config: Config):
    page = read_stub("events/covalent-page.json")
    # StakeAdded: one full page then empty, StakeRemoved: empty
    mock_get = Mock(
        side_effect=[MockResponse(page), MockResponse(EMPTY_PAGE), MockResponse(EMPTY_PAGE)]
    )
    monkeypatch.setattr(covalent.requests, "get", mock_get)

    events = get_stake_events_covalent(config, config.deploy_block + 10)

    assert len(events) == 2
    assert mock_get.call_count == 3
    assert [c.kwargs["params"]["page-number"] for c in mock_get.call_args_list] == [0, 1, 0]
    assert events == sorted(events, key=lambda e: e.order_key)


def test_pagination_per_chunk(monkeypatch, config: Config):
    mock_get = Mock(return_value=MockResponse(EMPTY_PAGE))
    monkeypatch.setattr(covalent.requests, "get", mock_get)
    config.block_range = 5

    get_stake_events_covalent(config, config.deploy_block + 9)

    # 2 chunks x 2 event kinds, one empty page each
    assert mock_get.call_count == 4
    starts = [c.kwargs["params"]["starting-block"] for c in mock_get.call_args_list]
    assert starts == [config.deploy_block, config.deploy_block + 5] * 2


def test_failed_page_is_retried(monkeypatch, config: Config):
    mock_get = Mock(
        side_effect=[
            MockResponse({}, status_code=500),
            MockResponse(EMPTY_PAGE),
            MockResponse(EMPTY_PAGE),
        ]
    )
    monkeypatch.setattr(covalent.requests, "get", mock_get)

    assert get_stake_events_covalent(config, config.deploy_block) == []
    assert mock_get.call_count == 3


def test_error_response_raises(monkeypatch, config: Config):
    error = {"data": None, "error": True, "error_message": "Invalid API key"}
    monkeypatch.setattr(covalent.requests, "get", Mock(return_value=MockResponse(error)))

    with pytest.raises(RetrievalFailureError):
        get_stake_events_covalent(config, config.deploy_block)


def test_too_many_pages(monkeypatch, config: Config):
    page = read_stub("events/covalent-page.json")
    monkeypatch.setattr(covalent.requests, "get", Mock(return_value=MockResponse(page)))

    with pytest.raises(RetrievalFailureError, match="Too many pages"):
        get_stake_events_covalent(config, config.deploy_block, max_pages=3)
