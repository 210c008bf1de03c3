from collections import deque
from typing import Iterable, Optional

from staking_reporter.errors import (
    LedgerInconsistencyError,
    ProtocolViolationError,
)
from staking_reporter.models import (
    Deposit,
    EthereumAddress,
    EventKind,
    StakeEvent,
    Timestamp,
)

"""
Off-chain replica of the staking contract's deposit bookkeeping.

Each account owns a queue of deposits. Staking pushes a deposit to the back, unstaking consumes
deposits from the front (oldest first), splitting the front deposit if only part of it is removed.
The sum of an account's queue always equals its staked balance in the contract.
"""


class StakeLedger:
    auth_amount: int
    auth_period: int

    def __init__(self, auth_amount: int, auth_period: int):
        self.auth_amount = auth_amount
        self.auth_period = auth_period
        self._deposits: dict[EthereumAddress, deque[Deposit]] = {}
        self._last_applied: dict[EthereumAddress, StakeEvent] = {}
        # set once a share snapshot reads the ledger
        self.frozen = False

    def apply(self, events: Iterable[StakeEvent]) -> None:
        """
        Replay events in chain order. Any misordered, duplicated or unsupported event aborts the
        replay, as does a removal larger than the account's deposits.
        """
        if self.frozen:
            raise ProtocolViolationError("Can not apply events to a frozen ledger")

        for event in events:
            self._check_order(event)

            if event.kind == EventKind.STAKE_ADDED:
                self._push(event)
            elif event.kind == EventKind.STAKE_REMOVED:
                self._remove(event)
            else:
                raise ProtocolViolationError(
                    f"Unsupported event: {event.kind}, account: {event.account}, timestamp: {event.timestamp}"
                )
            self._last_applied[event.account] = event

    def freeze(self) -> None:
        self.frozen = True

    def _check_order(self, event: StakeEvent) -> None:
        if event.value <= 0:
            raise ProtocolViolationError(
                f"Event with non positive value {event.value}, account: {event.account}, timestamp: {event.timestamp}"
            )

        last = self._last_applied.get(event.account)
        if last is None:
            return

        if event.order_key < last.order_key:
            raise ProtocolViolationError(
                f"Can not load older event, account: {event.account}, timestamp: {event.timestamp}, last applied: {last.timestamp}"
            )
        if event.order_key == last.order_key:
            raise ProtocolViolationError(
                f"Duplicate event, account: {event.account}, timestamp: {event.timestamp}, block: {event.block_number}"
            )

    def _push(self, event: StakeEvent) -> None:
        queue = self._deposits.setdefault(event.account, deque())
        queue.append(Deposit(value=event.value, timestamp=event.timestamp))

    def _remove(self, event: StakeEvent) -> None:
        available = self.deposit_sum(event.account)
        if event.value > available:
            raise LedgerInconsistencyError(
                f"Removing {event.value} with only {available} deposited, account: {event.account}, timestamp: {event.timestamp}"
            )

        queue = self._deposits[event.account]
        left_to_remove = event.value
        while left_to_remove > 0:
            oldest = queue[0]
            if left_to_remove >= oldest.value:
                queue.popleft()
                left_to_remove -= oldest.value
            else:
                # partially consumed deposit keeps its timestamp
                queue[0] = Deposit(
                    value=oldest.value - left_to_remove, timestamp=oldest.timestamp
                )
                left_to_remove = 0

    def accounts(self) -> list[EthereumAddress]:
        """Every account that emitted an event, in order of first appearance"""
        return list(self._last_applied.keys())

    def deposits(self, account: EthereumAddress) -> list[Deposit]:
        return list(self._deposits.get(account, ()))

    def oldest_deposit(self, account: EthereumAddress) -> Optional[Deposit]:
        queue = self._deposits.get(account)
        if not queue:
            return None
        return queue[0]

    def deposit_sum(self, account: EthereumAddress) -> int:
        return sum(d.value for d in self._deposits.get(account, ()))

    def value_held_before(self, account: EthereumAddress, cutoff: Timestamp) -> int:
        """Sum of the deposits made at or before `cutoff`, the queue is ordered by time"""
        total = 0
        for deposit in self._deposits.get(account, ()):
            if deposit.timestamp > cutoff:
                break
            total += deposit.value
        return total

    def is_authorized(self, account: EthereumAddress, as_of: Timestamp) -> bool:
        held = self.value_held_before(account, as_of - self.auth_period)
        # accounts with nothing left staked are never authorized, even for a zero amount
        return held > 0 and held >= self.auth_amount
