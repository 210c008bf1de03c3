from typing import Literal, Optional

from eth_utils import to_checksum_address

from staking_reporter.config import load_conf
from staking_reporter.errors import BadConfigException, UnknownAccountError
from staking_reporter.models import (
    DB,
    Config,
    EthereumAddress,
    MerkleClaim,
    MerkleDistribution,
    StakeEvent,
    Timestamp,
    Writer,
)
from staking_reporter.queries import (
    get_block_timestamp,
    get_stake_events,
    get_stake_events_covalent,
    load_stake_events,
    resolve_snapshot_block,
)
from staking_reporter.reports import (
    build_authorized_accounts_report,
    build_bonuses_report,
    build_deposits_report,
    build_full_shares_report,
    build_stake_balances_report,
)
from staking_reporter.rewards import (
    ShareSnapshot,
    build_merkle_distribution,
    compute_amounts,
    compute_shares,
)
from staking_reporter.staking import PeriodTracker, StakeLedger
from staking_reporter.utils import read_json

EventSource = Literal["rpc", "covalent", "file"]


def snapshot_block_for(config: Config, source: EventSource) -> int:
    """
    Events from a file are not tied to a chain, "latest" is reported as block 0
    rather than looked up
    """
    if source == "file":
        return 0 if config.snapshot_block == "latest" else int(config.snapshot_block)
    return resolve_snapshot_block(config.snapshot_block)


def fetch_events(
    config: Config,
    source: EventSource,
    snapshot_block: int,
    events_file: Optional[str] = None,
    token_values: bool = False,
) -> list[StakeEvent]:
    if source == "rpc":
        return get_stake_events(config, snapshot_block)
    if source == "covalent":
        return get_stake_events_covalent(config, snapshot_block)
    if source == "file":
        if not events_file:
            raise BadConfigException("Pass --events_file to load events from a file")
        return load_stake_events(events_file, token_values)
    raise BadConfigException(f"Unknown event source: {source}, use rpc, covalent or file")


def run_state(
    path_to_config: str,
    source: EventSource = "rpc",
    events_file: Optional[str] = None,
    token_values: bool = False,
) -> StakeLedger:
    """
    Replay the staking contract state up to the snapshot block and save the authorized accounts,
    their balances and every account's surviving deposits
    """
    config = load_conf(path_to_config)
    writer = Writer(config)

    snapshot_block = snapshot_block_for(config, source)
    events = fetch_events(config, source, snapshot_block, events_file, token_values)

    ledger = StakeLedger(config.auth_amount_wei, config.auth_period)
    ledger.apply(events)

    # authorization as the contract would see it at the snapshot block
    cutoff: Timestamp = (
        config.airdrop_timestamp
        if source == "file"
        else get_block_timestamp(snapshot_block)
    )

    writer.to_csv_and_json(
        build_authorized_accounts_report(ledger, snapshot_block, cutoff),
        "authorizedAccounts",
    )
    writer.to_csv_and_json(
        build_stake_balances_report(ledger, snapshot_block, cutoff),
        "authorizedAccountsStakeBalances",
    )
    writer.to_json(build_deposits_report(ledger, snapshot_block), "deposits")

    print(f"✨✨ Saved staking state at block {snapshot_block} ✨✨")
    return ledger


def run_shares(
    path_to_config: str,
    source: EventSource = "rpc",
    events_file: Optional[str] = None,
    token_values: bool = False,
) -> MerkleDistribution:
    """
    Replay every event up to the snapshot, compute the airdrop shares and amounts of the
    authorized accounts and build the merkle distribution.
    Nothing is written unless the shares add up.
    """
    config = load_conf(path_to_config)
    writer = Writer(config)

    snapshot_block = snapshot_block_for(config, source)
    events = fetch_events(config, source, snapshot_block, events_file, token_values)

    tracker = PeriodTracker.from_params(config.auth_amount_wei, config.auth_period)
    tracker.load_events(events)

    snapshot = ShareSnapshot(
        tracker, config.airdrop_timestamp, config.average_stake_period
    )
    shares_sum = snapshot.check_shares_sum()

    shares = compute_shares(snapshot)
    amounts = compute_amounts(snapshot, config.airdrop_amount_wei)
    distribution = build_merkle_distribution(amounts, snapshot_block)

    writer.to_csv_and_json(build_bonuses_report(snapshot, snapshot_block), "BonusesReport")
    writer.to_json(
        build_full_shares_report(snapshot, snapshot_block, shares_sum),
        "FullSharesReport",
    )
    writer.to_csv_and_json(shares, "airdrop_shares")
    writer.to_csv_and_json(amounts, "airdrop_results")

    db = DB(config, drop=True)
    db.write_stats(
        snapshot_block,
        snapshot.start_timestamp,
        len(snapshot.authorized_accounts),
        snapshot.global_calculation_details(),
        shares_sum,
    )
    db.write_shares(shares)
    db.write_distribution(amounts)
    db.write_merkle_distribution(distribution)

    return distribution


def load_merkle_distribution(config: Config) -> MerkleDistribution:
    return MerkleDistribution.model_validate(
        read_json(f"{config.path}/merkle-distribution.json")
    )


def lookup_proof(path_to_config: str, account: EthereumAddress) -> MerkleClaim:
    """Amount and proof of `account` in an already built distribution"""
    config = load_conf(path_to_config)
    distribution = load_merkle_distribution(config)

    claim = distribution.claims.get(to_checksum_address(account))
    if claim is None:
        raise UnknownAccountError(
            f"Account {account} has no claim in the distribution for {config.date}"
        )
    return claim
