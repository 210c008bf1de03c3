"""
Shapes of the JSON artifacts. Keys are camelCase so that the files stay compatible
with the existing airdrop tooling that consumes them.
"""
from typing import Optional, Union

from pydantic import BaseModel

from staking_reporter.models.Stake import ReadableStake
from staking_reporter.models.types import BigNumber, EthereumAddress, Timestamp


class AuthorizedAccountsReport(BaseModel):
    snapshotBlockNumber: int
    authorizedAmount: BigNumber
    authorizedPeriod: int
    authorizedAccounts: list[EthereumAddress]


class AccountStakeBalance(BaseModel):
    account: EthereumAddress
    stakeBalance: BigNumber


class AuthorizedAccountsStakeBalancesReport(BaseModel):
    snapshotBlockNumber: int
    authorizedAmount: BigNumber
    authorizedPeriod: int
    authorizedAccountsStakeBalances: list[AccountStakeBalance]


class DepositsReport(BaseModel):
    snapshotBlockNumber: int
    accountsStakes: dict[EthereumAddress, list[ReadableStake]]


class AccountBonus(BaseModel):
    account: EthereumAddress
    bonus: str


class BonusesReport(BaseModel):
    snapshotBlockNumber: int
    startTimestamp: Timestamp
    airdropTimestamp: Timestamp
    authorizedAmount: BigNumber
    authorizedPeriod: int
    authorizedAccountsBonuses: list[AccountBonus]


class AccountDetailedShare(BaseModel):
    """
    :param `stakes`, `unstakes`: every StakeAdded / StakeRemoved the account emitted
    :param `calculationDetails`: readable `AccountShareDetails`
    """

    account: EthereumAddress
    stakes: list[ReadableStake]
    unstakes: list[ReadableStake]
    stakeBalance: BigNumber
    calculationDetails: dict[str, Union[str, int]]


class AirdropChecks(BaseModel):
    sharesSum: BigNumber


class FullSharesReport(BaseModel):
    snapshotBlockNumber: int
    startTimestamp: Timestamp
    airdropTimestamp: Timestamp
    authorizedAmount: BigNumber
    authorizedPeriod: int
    globalCalculationDetails: dict[str, str]
    airdropChecks: AirdropChecks
    authorizedAccountsDetailedShares: list[AccountDetailedShare]


class MerkleClaim(BaseModel):
    amount: BigNumber
    proof: list[str]


class MerkleDistribution(BaseModel):
    """
    Everything needed to deploy the distributor and to claim from it
    :param `merkleRoot`: root passed to the MerkleDistributor constructor
    :param `tokenTotal`: sum of all claimable amounts
    """

    merkleRoot: str
    tokenTotal: BigNumber
    claims: dict[EthereumAddress, MerkleClaim]
    snapshotBlockNumber: Optional[int] = None
