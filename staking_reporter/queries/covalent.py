import datetime
from typing import Any, Optional

import requests
from eth_utils import encode_hex, keccak

from staking_reporter.env import COVALENTHQ
from staking_reporter.errors import RetrievalFailureError
from staking_reporter.models import (
    Config,
    EventKind,
    StakeEvent,
    Timestamp,
    sort_events,
)
from staking_reporter.queries.common import (
    BlocksRange,
    calc_block_ranges,
    retry_query,
)

MAX_PAGES = 1000


def topic_for(kind: EventKind) -> str:
    return encode_hex(keccak(text=f"{kind.value}(address,uint256)"))


def build_covalent_url(conf: Config, kind: EventKind) -> str:
    base_url = COVALENTHQ.base_url()
    if not base_url.endswith("/"):
        base_url += "/"
    return f"{base_url}{conf.chain_id}/events/topics/{topic_for(kind)}/"


def build_covalent_params(
    conf: Config, block_range: BlocksRange, page_number: int
) -> dict[str, Any]:
    return {
        "format": "JSON",
        "quote-currency": "USD",
        "sender-address": conf.staking_address,
        "starting-block": block_range.from_block,
        "ending-block": block_range.to_block,
        "page-size": conf.page_size,
        "page-number": page_number,
        "key": COVALENTHQ.api_key(),
    }


def parse_signed_at(block_signed_at: str) -> Timestamp:
    """Covalent returns ISO dates like 2022-02-01T10:00:00Z"""
    date = datetime.datetime.fromisoformat(block_signed_at.replace("Z", "+00:00"))
    if date.tzinfo is None:
        date = date.replace(tzinfo=datetime.timezone.utc)
    return int(date.timestamp())


def parse_covalent_items(items: list[dict[str, Any]]) -> list[StakeEvent]:
    events = []
    for item in items:
        params = item["decoded"]["params"]
        events.append(
            StakeEvent(
                account=params[0]["value"],
                kind=EventKind(item["decoded"]["name"]),
                value=int(params[1]["value"]),
                block_number=int(item["block_height"]),
                timestamp=parse_signed_at(item["block_signed_at"]),
                log_index=int(item.get("log_offset") or 0),
                transaction_hash=item.get("tx_hash"),
            )
        )
    return events


def get_covalent_page(url: str, params: dict[str, Any]) -> list[dict[str, Any]]:
    response = requests.get(url, params=params, timeout=60)
    response.raise_for_status()
    body = response.json()

    if not body or body.get("error"):
        raise RetrievalFailureError(
            f"Error in covalent query to {url}: {body and body.get('error_message')}"
        )
    return body["data"]["items"]


def get_events_with_pagination(
    conf: Config,
    kind: EventKind,
    end_block: int,
    max_pages: int = MAX_PAGES,
) -> list[StakeEvent]:
    """
    Covalent caps the number of items per page.
    Walk every block chunk page by page and stop a chunk when a page comes back empty.
    """
    url = build_covalent_url(conf, kind)
    events: list[StakeEvent] = []

    for index, block_range in enumerate(
        calc_block_ranges(conf.block_range, conf.deploy_block, end_block)  # type: ignore
    ):
        page_number = 0
        while True:
            if page_number >= max_pages:
                raise RetrievalFailureError(
                    f"Too many pages for '{kind.value}' in blocks [{block_range.from_block}-{block_range.to_block}]"
                )
            print(
                f"[Events/Pagination] Getting '{kind.value}' events for page {page_number} - chunk {index}"
            )
            params = build_covalent_params(conf, block_range, page_number)
            items = retry_query(
                lambda: get_covalent_page(url, params),
                f"covalent {kind.value} page {page_number} chunk {index}",
            )
            if len(items) == 0:
                break
            events += parse_covalent_items(items)
            page_number += 1

    print(f"[Stake Events] Got total {len(events)} '{kind.value}' events")
    return events


def get_stake_events_covalent(
    conf: Config, end_block: int, max_pages: Optional[int] = None
) -> list[StakeEvent]:
    """StakeAdded and StakeRemoved events from covalent, sorted for replay"""
    pages = max_pages or MAX_PAGES
    events = []
    for kind in EventKind:
        events += get_events_with_pagination(conf, kind, end_block, pages)
    return sort_events(events)
