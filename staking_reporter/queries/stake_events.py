from concurrent.futures import ThreadPoolExecutor
from itertools import chain
from typing import Any, Optional

from eth_utils import encode_hex, keccak

from staking_reporter.models import (
    Config,
    EthereumAddress,
    EventKind,
    StakeEvent,
    sort_events,
)
from staking_reporter.queries.common import (
    BlocksRange,
    calc_block_ranges,
    get_block_timestamp,
    get_w3,
    retry_query,
)

"""
Fetch StakeAdded and StakeRemoved logs straight from the node.

Ranges are disjoint, so they are fetched in parallel and every range is retried on its own.
Nothing is replayed until all ranges have returned and the events are sorted globally.
"""

# simplified ABI containing just the events we want to decode
STAKING_EVENTS_ABI = [
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "address", "name": "account", "type": "address"},
            {"indexed": False, "internalType": "uint256", "name": "value", "type": "uint256"},
        ],
        "name": kind.value,
        "type": "event",
    }
    for kind in EventKind
]

MAX_WORKERS = 4


def event_topic(kind: EventKind) -> str:
    return encode_hex(keccak(text=f"{kind.value}(address,uint256)"))


def account_topic(account: EthereumAddress) -> str:
    """Indexed addresses are left padded to 32 bytes"""
    return "0x" + account.lower().replace("0x", "").rjust(64, "0")


def get_stake_logs(
    conf: Config,
    kind: EventKind,
    block_range: BlocksRange,
    account: Optional[EthereumAddress] = None,
) -> list[Any]:
    topics: list[Optional[str]] = [event_topic(kind)]
    if account is not None:
        topics.append(account_topic(account))

    print(
        f"[Stake Events] Getting '{kind.value}' in range [{block_range.from_block}-{block_range.to_block}], account: [{account}]"
    )
    logs = retry_query(
        lambda: get_w3().eth.get_logs(
            {
                "address": conf.staking_address,
                "fromBlock": block_range.from_block,
                "toBlock": block_range.to_block,
                "topics": topics,
            }
        ),
        f"{kind.value} logs [{block_range.from_block}-{block_range.to_block}]",
    )
    print(
        f"[Stake Events] Found {len(logs)} '{kind.value}' events in blocks [{block_range.from_block}-{block_range.to_block}]"
    )
    return logs


def parse_log(conf: Config, kind: EventKind, log: Any) -> StakeEvent:
    contract = get_w3().eth.contract(
        address=conf.staking_address, abi=STAKING_EVENTS_ABI  # type: ignore
    )
    decoded = getattr(contract.events, kind.value)().process_log(log)
    return StakeEvent(
        account=decoded["args"]["account"],
        kind=kind,
        value=int(decoded["args"]["value"]),
        block_number=int(log["blockNumber"]),
        timestamp=get_block_timestamp(int(log["blockNumber"])),
        log_index=int(log["logIndex"]),
        transaction_hash=encode_hex(log["transactionHash"]),
    )


def get_combined_stake_events(
    conf: Config,
    block_range: BlocksRange,
    account: Optional[EthereumAddress] = None,
) -> list[StakeEvent]:
    """StakeAdded and StakeRemoved events of a single range, sorted"""
    events = [
        parse_log(conf, kind, log)
        for kind in EventKind
        for log in get_stake_logs(conf, kind, block_range, account)
    ]
    return sort_events(events)


def get_stake_events(
    conf: Config,
    to_block: int,
    account: Optional[EthereumAddress] = None,
    max_workers: int = MAX_WORKERS,
) -> list[StakeEvent]:
    """
    Every stake event from the staking contract deployment up to `to_block` (inclusive),
    optionally for a single account, sorted by timestamp then log order
    """
    ranges = calc_block_ranges(conf.block_range, conf.deploy_block, to_block)  # type: ignore

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        per_range = list(
            executor.map(lambda r: get_combined_stake_events(conf, r, account), ranges)
        )

    events = sort_events(list(chain.from_iterable(per_range)))
    print(f"[Stake Events] Got total {len(events)} events up to block {to_block}")
    return events
