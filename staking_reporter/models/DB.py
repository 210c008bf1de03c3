import os

from tinydb import TinyDB

from staking_reporter.models.Config import Config
from staking_reporter.models.Reports import MerkleDistribution
from staking_reporter.models.Shares import AirdropAmount, AirdropShare, GlobalShareDetails
from staking_reporter.utils import write_json


class DB(TinyDB):
    """
    Run database for a single airdrop, stored next to the reports.
    Tables:
    - `stats`: snapshot metadata and the global calculation details
    - `shares`: validated share of every authorized account
    - `distribution`: token amount of every authorized account
    """

    config: Config

    def __init__(self, conf: Config, drop=False, **kwargs):
        self.config = conf
        path = f"{conf.path}/reporter-db.json"

        # check if the directory exists
        create_dirs = self.exists(path) == False
        super().__init__(
            path,
            indent=4,
            create_dirs=create_dirs,
            **kwargs,
        )

        if drop:
            self.drop_tables()

    @staticmethod
    def exists(path: str):
        return os.path.exists(path)

    def write_stats(
        self,
        snapshot_block: int,
        start_timestamp: int,
        authorized_accounts: int,
        details: GlobalShareDetails,
        shares_sum: int,
    ):
        self.table("stats").insert(
            {
                "snapshot_block": snapshot_block,
                "airdrop_timestamp": self.config.airdrop_timestamp,
                "start_timestamp": start_timestamp,
                "authorized_accounts": authorized_accounts,
                "calculation_details": details.readable(),
                "shares_sum": str(shares_sum),
            }
        )

    def write_shares(self, shares: list[AirdropShare]):
        self.table("shares").insert_multiple([s.model_dump() for s in shares])

    def write_distribution(self, amounts: list[AirdropAmount]):
        self.table("distribution").insert_multiple([a.model_dump() for a in amounts])

    def write_merkle_distribution(self, distribution: MerkleDistribution) -> str:
        path = f"{self.config.path}/merkle-distribution.json"
        write_json(distribution.model_dump(), path)
        print(
            f"🚀🚀🚀 Successfully created the merkle distribution, root: {distribution.merkleRoot}"
        )
        return path
