import time
from functools import lru_cache
from typing import Callable, NamedTuple, TypeVar

from web3 import Web3

from staking_reporter.env import rpc_url
from staking_reporter.errors import (
    MissingEnvironmentVariableException,
    RetrievalFailureError,
)
from staking_reporter.models import Timestamp

# python insantiates generics separate to function definition
T = TypeVar("T")

MAX_RETRIES = 10
BACKOFF_BASE_SECONDS = 0.5
MAX_BACKOFF_SECONDS = 30.0


@lru_cache(maxsize=1)
def get_w3() -> Web3:
    return Web3(Web3.HTTPProvider(rpc_url()))


class BlocksRange(NamedTuple):
    """Inclusive on both ends"""

    from_block: int
    to_block: int


def calc_block_ranges(range_size: int, start_block: int, end_block: int) -> list[BlocksRange]:
    """
    Events are taken in the ranges of block numbers inclusive, e.g:
    [50000-99999]
    [100000-149999]
    [150000-160000]
    """
    ranges = []
    for from_block in range(start_block, end_block + 1, range_size):
        to_block = min(from_block + range_size - 1, end_block)
        ranges.append(BlocksRange(from_block, to_block))
    return ranges


def retry_query(
    query: Callable[[], T],
    name: str,
    max_retries: int = MAX_RETRIES,
    backoff_base: float = BACKOFF_BASE_SECONDS,
) -> T:
    """
    Calls `query` until it succeeds, doubling the wait after every failure.
    Fetches are idempotent so retrying a range or a page is always safe.
    """
    last_error: Exception = RetrievalFailureError(name)
    for attempt in range(max_retries):
        try:
            return query()
        except MissingEnvironmentVariableException:
            raise
        except Exception as e:
            last_error = e
            wait = min(backoff_base * 2**attempt, MAX_BACKOFF_SECONDS)
            print(f"[Stake Events] {name} failed: {e}, trying again ({attempt + 1}/{max_retries}) in {wait}s")
            time.sleep(wait)

    raise RetrievalFailureError(
        f"{name} failed with {max_retries} attempts: {last_error}"
    ) from last_error


def get_latest_block() -> int:
    return retry_query(lambda: get_w3().eth.block_number, "latest block")


@lru_cache(maxsize=None)
def get_block_timestamp(block_number: int) -> Timestamp:
    block = retry_query(
        lambda: get_w3().eth.get_block(block_number), f"block {block_number}"
    )
    return int(block["timestamp"])


def resolve_snapshot_block(snapshot_block) -> int:
    """Snapshot block from the config, "latest" is looked up on chain"""
    if snapshot_block == "latest":
        return get_latest_block()
    return int(snapshot_block)
