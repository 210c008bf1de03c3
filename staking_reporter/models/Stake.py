from __future__ import annotations
from pydantic import BaseModel

from staking_reporter.models.types import BigNumber, Timestamp


class Deposit(BaseModel):
    """
    A queued unit of stake, mirroring a single entry of the staking contract's deposit array.
    Pushed on `StakeAdded`, consumed oldest first on `StakeRemoved`.
    """

    value: int
    timestamp: Timestamp

    def readable(self) -> ReadableStake:
        return ReadableStake(value=str(self.value), timestamp=self.timestamp)


class ReadableStake(BaseModel):
    """Deposit with the value as a string, used in reports"""

    value: BigNumber
    timestamp: Timestamp


class StakePeriod(BaseModel):
    """
    The stake value held by an account over [from_timestamp, from_timestamp + duration)
    :param `duration`: seconds the value lasted. 0 while the period is still open
    :param `open`: true only for the last period of an account, which lasts until the cutoff
    """

    value: int
    from_timestamp: Timestamp
    duration: int = 0
    open: bool = True

    def end(self, cutoff: Timestamp) -> Timestamp:
        """Where the period stops, open periods run until the cutoff"""
        if self.open:
            return cutoff
        return self.from_timestamp + self.duration
