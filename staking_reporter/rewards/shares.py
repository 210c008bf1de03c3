from decimal import Decimal, ROUND_FLOOR, getcontext
from typing import Iterable

from staking_reporter.errors import ShareSumOutOfBoundsError
from staking_reporter.models import (
    AccountShareDetails,
    EthereumAddress,
    GlobalShareDetails,
    Timestamp,
)
from staking_reporter.staking import PeriodTracker, authorized_accounts

# shares are integers out of 10^36, anything below 64 significant digits
# loses precision on the sum
getcontext().prec = 64

DENOMINATOR = 10**36
SHARES_SUM_EPSILON = Decimal("1e-18")


def floor_decimal(value: Decimal) -> Decimal:
    return value.to_integral_value(rounding=ROUND_FLOOR)


class ShareSnapshot:
    """
    Airdrop share calculations for a fully replayed `PeriodTracker` at `airdrop_timestamp`.

    The aggregates every account depends on are computed once, in order, when the snapshot is built:
    authorized accounts -> average stake period -> sum of absolute deviations -> sum of stakes with bonus.
    Load all events into the tracker before building the snapshot, building it freezes the tracker.
    """

    tracker: PeriodTracker
    airdrop_timestamp: Timestamp
    average_stake_window: int

    def __init__(
        self,
        tracker: PeriodTracker,
        airdrop_timestamp: Timestamp,
        average_stake_window: int,
    ):
        tracker.freeze()
        self.tracker = tracker
        self.airdrop_timestamp = airdrop_timestamp
        self.average_stake_window = average_stake_window

        self.authorized_accounts = authorized_accounts(tracker.ledger, airdrop_timestamp)
        self.start_timestamp = tracker.start_timestamp(self.authorized_accounts)
        self.average_stake_period = self._average_stake_period()
        self.deviations_absolute_sum = self._deviations_absolute_sum()
        self.stake_with_bonus_sum = self._stake_with_bonus_sum()

    # ----------------------------------------------------------
    # INDIVIDUAL ACCOUNT FUNCTIONS

    def stakes_period(self, account: EthereumAddress) -> int:
        return self.tracker.stakes_period(account, self.airdrop_timestamp)

    def average_stake(self, account: EthereumAddress) -> Decimal:
        """
        Stake value averaged over the window preceding the airdrop.
        Periods are clipped to the window, the open last period lasts until the airdrop.
        """
        window_start = self.airdrop_timestamp - self.average_stake_window

        # VMP - value multiplied by the period
        total_vmp = 0
        for period in self.tracker.periods(account):
            start = max(period.from_timestamp, window_start)
            end = min(period.end(self.airdrop_timestamp), self.airdrop_timestamp)
            if end <= start:
                continue
            total_vmp += period.value * (end - start)

        return Decimal(total_vmp) / Decimal(self.average_stake_window)

    def period_deviation(self, account: EthereumAddress) -> Decimal:
        # could be negative
        return Decimal(self.stakes_period(account)) - self.average_stake_period

    def account_bonus(self, account: EthereumAddress) -> Decimal:
        if self.deviations_absolute_sum == 0:
            return Decimal(0)
        return self.period_deviation(account) / self.deviations_absolute_sum

    def stake_with_bonus(self, account: EthereumAddress) -> Decimal:
        # average stake * (bonus + 1)
        return self.average_stake(account) * (self.account_bonus(account) + 1)

    def share(self, account: EthereumAddress) -> int:
        """Integer share of `DENOMINATOR`, floored"""
        if self.stake_with_bonus_sum == 0:
            return 0
        numerator = floor_decimal(self.stake_with_bonus(account) * DENOMINATOR)
        return int(floor_decimal(numerator / self.stake_with_bonus_sum))

    def calculation_details(self, account: EthereumAddress) -> AccountShareDetails:
        return AccountShareDetails(
            period=self.stakes_period(account),
            average_stake=self.average_stake(account),
            deviation=self.period_deviation(account),
            bonus=self.account_bonus(account),
            stake_with_bonus=self.stake_with_bonus(account),
            share=self.share(account),
        )

    # ----------------------------------------------------------
    # FUNCTIONS FOR ALL AUTHORIZED ACCOUNTS

    def _average_stake_period(self) -> Decimal:
        if not self.authorized_accounts:
            return Decimal(0)
        total_period = sum(self.stakes_period(a) for a in self.authorized_accounts)
        return Decimal(total_period) / Decimal(len(self.authorized_accounts))

    def _deviations_absolute_sum(self) -> Decimal:
        return self._decimal_sum(
            abs(self.period_deviation(a)) for a in self.authorized_accounts
        )

    def _stake_with_bonus_sum(self) -> Decimal:
        return self._decimal_sum(
            self.stake_with_bonus(a) for a in self.authorized_accounts
        )

    @staticmethod
    def _decimal_sum(values: Iterable[Decimal]) -> Decimal:
        total = Decimal(0)
        for v in values:
            total += v
        return total

    def global_calculation_details(self) -> GlobalShareDetails:
        return GlobalShareDetails(
            shares_denominator=DENOMINATOR,
            average_stake_period=self.average_stake_period,
            deviations_absolute_sum=self.deviations_absolute_sum,
            stake_with_bonus_sum=self.stake_with_bonus_sum,
        )

    def shares(self) -> dict[EthereumAddress, int]:
        return {a: self.share(a) for a in self.authorized_accounts}

    # ----------- check functions

    def check_shares_sum(self) -> int:
        """
        Validate the shares before publishing them.
        Flooring loses at most one unit per account, so the sum must sit in
        [DENOMINATOR * (1 - 1e-18), DENOMINATOR].
        """
        print("[Shares] validating accounts shares...")

        total = 0
        for account, share in self.shares().items():
            if share < 0:
                raise ShareSumOutOfBoundsError(
                    f"Negative share {share}, account: {account}, timestamp: {self.airdrop_timestamp}"
                )
            total += share

        if total > DENOMINATOR:
            raise ShareSumOutOfBoundsError(
                f"Shares sum greater than denominator: {total} of {DENOMINATOR}, timestamp: {self.airdrop_timestamp}"
            )

        min_shares = Decimal(DENOMINATOR) * (1 - SHARES_SUM_EPSILON)
        if total < min_shares:
            raise ShareSumOutOfBoundsError(
                f"Shares sum lower than expected: {total}, for min value: {int(min_shares)}, timestamp: {self.airdrop_timestamp}"
            )

        return total
