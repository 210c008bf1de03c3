from staking_reporter.models import (
    AccountBonus,
    AccountDetailedShare,
    AccountStakeBalance,
    AirdropChecks,
    AuthorizedAccountsReport,
    AuthorizedAccountsStakeBalancesReport,
    BonusesReport,
    Deposit,
    DepositsReport,
    EthereumAddress,
    FullSharesReport,
    ReadableStake,
    Timestamp,
    fixed_decimal,
)
from staking_reporter.rewards import ShareSnapshot
from staking_reporter.staking import StakeLedger, authorized_accounts


def readable_stakes(deposits: list[Deposit]) -> list[ReadableStake]:
    return [d.readable() for d in deposits]


# ----------------------------------------------------------
# STATE REPORTS: built from the ledger alone


def build_authorized_accounts_report(
    ledger: StakeLedger, snapshot_block: int, cutoff: Timestamp
) -> AuthorizedAccountsReport:
    return AuthorizedAccountsReport(
        snapshotBlockNumber=snapshot_block,
        authorizedAmount=str(ledger.auth_amount),
        authorizedPeriod=ledger.auth_period,
        authorizedAccounts=authorized_accounts(ledger, cutoff),
    )


def build_stake_balances_report(
    ledger: StakeLedger, snapshot_block: int, cutoff: Timestamp
) -> AuthorizedAccountsStakeBalancesReport:
    return AuthorizedAccountsStakeBalancesReport(
        snapshotBlockNumber=snapshot_block,
        authorizedAmount=str(ledger.auth_amount),
        authorizedPeriod=ledger.auth_period,
        authorizedAccountsStakeBalances=[
            AccountStakeBalance(account=a, stakeBalance=str(ledger.deposit_sum(a)))
            for a in authorized_accounts(ledger, cutoff)
        ],
    )


def build_deposits_report(ledger: StakeLedger, snapshot_block: int) -> DepositsReport:
    """Surviving deposits of every account seen, including the ones that unstaked everything"""
    return DepositsReport(
        snapshotBlockNumber=snapshot_block,
        accountsStakes={a: readable_stakes(ledger.deposits(a)) for a in ledger.accounts()},
    )


# ----------------------------------------------------------
# SHARES REPORTS: built from a share snapshot


def build_bonuses_report(snapshot: ShareSnapshot, snapshot_block: int) -> BonusesReport:
    ledger = snapshot.tracker.ledger
    return BonusesReport(
        snapshotBlockNumber=snapshot_block,
        startTimestamp=snapshot.start_timestamp,
        airdropTimestamp=snapshot.airdrop_timestamp,
        authorizedAmount=str(ledger.auth_amount),
        authorizedPeriod=ledger.auth_period,
        authorizedAccountsBonuses=[
            AccountBonus(account=a, bonus=fixed_decimal(snapshot.account_bonus(a)))
            for a in snapshot.authorized_accounts
        ],
    )


def build_detailed_share(snapshot: ShareSnapshot, account: EthereumAddress) -> AccountDetailedShare:
    tracker = snapshot.tracker
    return AccountDetailedShare(
        account=account,
        stakes=readable_stakes(tracker.stakes.get(account, [])),
        unstakes=readable_stakes(tracker.unstakes.get(account, [])),
        stakeBalance=str(tracker.ledger.deposit_sum(account)),
        calculationDetails=snapshot.calculation_details(account).readable(),
    )


def build_full_shares_report(
    snapshot: ShareSnapshot, snapshot_block: int, shares_sum: int
) -> FullSharesReport:
    """
    Everything needed to audit the shares by hand.
    :param `shares_sum`: result of `check_shares_sum`, so the report is only built for valid shares
    """
    ledger = snapshot.tracker.ledger
    return FullSharesReport(
        snapshotBlockNumber=snapshot_block,
        startTimestamp=snapshot.start_timestamp,
        airdropTimestamp=snapshot.airdrop_timestamp,
        authorizedAmount=str(ledger.auth_amount),
        authorizedPeriod=ledger.auth_period,
        globalCalculationDetails=snapshot.global_calculation_details().readable(),
        airdropChecks=AirdropChecks(sharesSum=str(shares_sum)),
        authorizedAccountsDetailedShares=[
            build_detailed_share(snapshot, a) for a in snapshot.authorized_accounts
        ],
    )
