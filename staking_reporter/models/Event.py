from __future__ import annotations
from enum import Enum
from typing import Optional

import eth_utils as eth
from pydantic import BaseModel, field_validator

from staking_reporter.models.types import EthereumAddress, Timestamp


class EventKind(str, Enum):
    """
    The two events emitted by the staking contract
    :kind STAKE_ADDED: `StakeAdded(address,uint256)`, a new deposit is pushed
    :kind STAKE_REMOVED: `StakeRemoved(address,uint256)`, value is withdrawn from deposits
    """

    STAKE_ADDED = "StakeAdded"
    STAKE_REMOVED = "StakeRemoved"


class StakeEvent(BaseModel):
    """
    A single stake-changing event, already resolved to its block timestamp.
    :param `value`: token amount in wei (18 decimals)
    :param `log_index`: position of the log inside its block, breaks ties between events
    sharing a timestamp
    """

    account: EthereumAddress
    kind: EventKind
    value: int
    block_number: int
    timestamp: Timestamp
    log_index: int = 0
    transaction_hash: Optional[str] = None

    @field_validator("account")
    @classmethod
    def checksum_account(cls, account: str) -> str:
        return eth.to_checksum_address(account)

    @property
    def order_key(self) -> tuple[int, int, int]:
        """Chain order: time first, then block and log position"""
        return (self.timestamp, self.block_number, self.log_index)

    @property
    def is_stake(self) -> bool:
        return self.kind == EventKind.STAKE_ADDED


def sort_events(events: list[StakeEvent]) -> list[StakeEvent]:
    """Globally order events from several sources before replay"""
    return sorted(events, key=lambda e: e.order_key)
