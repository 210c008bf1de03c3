from __future__ import annotations
from typing import NamedTuple, Optional

import eth_utils as eth
from pydantic import BaseModel, field_validator, model_validator

from staking_reporter.errors import BadConfigException
from staking_reporter.models.types import (
    BigNumber,
    BlockIdentifier,
    EthereumAddress,
    Timestamp,
)


class Deployment(NamedTuple):
    address: EthereumAddress
    # block number in which the staking contract was deployed
    deploy_block: int


STAKING_DEPLOYMENTS: dict[int, Deployment] = {
    # avalanche fuji
    43113: Deployment("0xb5C9a8CD0967F8d0640E31652749554FB6c7250F", 2994335),
    # avalanche mainnet
    43114: Deployment("0x5b0d74c78f2588b3c5c49857edb856cc731dc557", 7669478),
}


class InputConfig(BaseModel):
    """
    User supplied parameters for an airdrop snapshot
    :param `snapshot_block`: block height to replay events up to, or "latest"
    :param `auth_amount`: minimum stake (wei) an account must hold to be authorized
    :param `auth_period`: seconds the `auth_amount` must be held before the airdrop
    :param `airdrop_timestamp`: cutoff from which authorization and stake periods are counted
    :param `average_stake_period`: lookback window (seconds) for the average stake size
    :param `airdrop_amount`: total tokens (wei) split between authorized accounts
    :param `staking_address`, `deploy_block`: default to the known deployment for `chain_id`
    """

    chain_id: int
    snapshot_block: BlockIdentifier = "latest"
    auth_amount: BigNumber
    auth_period: int
    airdrop_timestamp: Timestamp
    average_stake_period: int
    airdrop_amount: BigNumber
    staking_address: Optional[EthereumAddress] = None
    deploy_block: Optional[int] = None
    block_range: int = 1_000_000
    page_size: int = 20_000

    @field_validator("auth_amount", "airdrop_amount", mode="before")
    @classmethod
    def validate_big_number(cls, value) -> str:
        try:
            parsed = int(value)
        except (TypeError, ValueError):
            raise BadConfigException(f"Not an integer amount: {value}")
        if parsed < 0:
            raise BadConfigException(f"Amount must not be negative: {value}")
        return str(parsed)

    @field_validator("auth_amount")
    @classmethod
    def validate_auth_amount(cls, value: str) -> str:
        if int(value) == 0:
            raise BadConfigException("Authorization amount must be positive")
        return value

    @field_validator("auth_period", "average_stake_period", "block_range", "page_size")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise BadConfigException(f"Expected a positive value, got {value}")
        return value

    @field_validator("snapshot_block")
    @classmethod
    def validate_snapshot_block(cls, block: BlockIdentifier) -> BlockIdentifier:
        if block != "latest" and int(block) < 0:
            raise BadConfigException(f"Snapshot block out of range: {block}")
        return block

    @field_validator("staking_address")
    @classmethod
    def checksum_staking(cls, addr: Optional[str]) -> Optional[str]:
        return eth.to_checksum_address(addr) if addr else addr

    @model_validator(mode="after")
    def fill_deployment(self) -> InputConfig:
        if self.staking_address and self.deploy_block is not None:
            return self

        deployment = STAKING_DEPLOYMENTS.get(self.chain_id)
        if deployment is None:
            raise BadConfigException(
                f"Staking deployment for chainId: {self.chain_id} is not defined, pass staking_address and deploy_block"
            )
        if not self.staking_address:
            self.staking_address = eth.to_checksum_address(deployment.address)
        if self.deploy_block is None:
            self.deploy_block = deployment.deploy_block
        return self


class Config(InputConfig):
    """
    The epoch config used by every step of the run
    :param `date`: UTC date of the airdrop, used to name the reports folder
    """

    date: str

    @property
    def auth_amount_wei(self) -> int:
        return int(self.auth_amount)

    @property
    def airdrop_amount_wei(self) -> int:
        return int(self.airdrop_amount)

    @property
    def path(self) -> str:
        return f"reports/{self.date}"
