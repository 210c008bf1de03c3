from typing import Iterable, Optional

from staking_reporter.errors import (
    LedgerInconsistencyError,
    NegativePeriodError,
    UnknownAccountError,
)
from staking_reporter.models import (
    Deposit,
    EthereumAddress,
    StakeEvent,
    StakePeriod,
    Timestamp,
)
from staking_reporter.staking.ledger import StakeLedger


class PeriodTracker:
    """
    Replays events through a `StakeLedger` and, alongside it, records how much each account
    had staked at every point in time.

    The timeline is kept apart from the ledger: authorization and stake periods are read from
    the surviving deposits, so that an account which unstaked everything and staked again
    starts a new streak, while the average stake still sees the full history.
    """

    ledger: StakeLedger

    def __init__(self, ledger: StakeLedger):
        self.ledger = ledger
        self._periods: dict[EthereumAddress, list[StakePeriod]] = {}
        # raw events, for the full report
        self.stakes: dict[EthereumAddress, list[Deposit]] = {}
        self.unstakes: dict[EthereumAddress, list[Deposit]] = {}

    @staticmethod
    def from_params(auth_amount: int, auth_period: int) -> "PeriodTracker":
        return PeriodTracker(StakeLedger(auth_amount, auth_period))

    def load_events(self, events: Iterable[StakeEvent]) -> None:
        """Raises `ProtocolViolationError` once a share snapshot has frozen the tracker"""
        for event in events:
            # ledger validates ordering and balances first
            self.ledger.apply([event])
            self._record_raw(event)
            self._push_period(event)

    def freeze(self) -> None:
        self.ledger.freeze()

    def _record_raw(self, event: StakeEvent) -> None:
        bucket = self.stakes if event.is_stake else self.unstakes
        bucket.setdefault(event.account, []).append(
            Deposit(value=event.value, timestamp=event.timestamp)
        )

    def last_period(self, account: EthereumAddress) -> Optional[StakePeriod]:
        periods = self._periods.get(account)
        if not periods:
            return None
        return periods[-1]

    def _new_value(self, event: StakeEvent) -> int:
        last = self.last_period(event.account)
        last_value = last.value if last else 0

        if event.is_stake:
            new_value = last_value + event.value
        else:
            new_value = last_value - event.value

        if new_value < 0:
            raise LedgerInconsistencyError(
                f"Stake value lower than 0: {new_value}, account: {event.account}, timestamp: {event.timestamp}"
            )
        return new_value

    def _close_last_period(self, event: StakeEvent) -> None:
        last = self.last_period(event.account)
        if last is None:
            return

        passed = event.timestamp - last.from_timestamp
        if passed < 0:
            raise NegativePeriodError(
                f"Negative period: {passed}, account: {event.account}, timestamp: {event.timestamp}"
            )
        last.duration = passed
        last.open = False

    def _push_period(self, event: StakeEvent) -> None:
        new_value = self._new_value(event)
        self._close_last_period(event)
        self._periods.setdefault(event.account, []).append(
            StakePeriod(value=new_value, from_timestamp=event.timestamp)
        )

    def periods(self, account: EthereumAddress) -> list[StakePeriod]:
        return list(self._periods.get(account, []))

    def stakes_period(self, account: EthereumAddress, cutoff: Timestamp) -> int:
        """
        Seconds between the oldest deposit still in the ledger and `cutoff`.
        Deposits are consumed oldest first, so the oldest survivor starts the current streak.
        """
        oldest = self.ledger.oldest_deposit(account)
        if oldest is None:
            raise UnknownAccountError(
                f"Trying to get first stake from empty account deposit {account}, timestamp: {cutoff}"
            )
        return cutoff - oldest.timestamp

    def start_timestamp(self, accounts: Iterable[EthereumAddress]) -> Timestamp:
        """Earliest surviving deposit among `accounts`, 0 if there are none"""
        oldest = [self.ledger.oldest_deposit(a) for a in accounts]
        timestamps = [d.timestamp for d in oldest if d is not None]
        return min(timestamps) if timestamps else 0
