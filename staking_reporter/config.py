import datetime
import json
from pathlib import Path
from typing import Optional, Union

from staking_reporter.models import Config, InputConfig

TOKEN_DECIMALS = 18


def days_to_seconds(days: int) -> int:
    return days * 24 * 60 * 60


def to_tokens(amount: Union[int, str], decimals: int = TOKEN_DECIMALS) -> int:
    """Whole tokens to their smallest unit, eg: 50 -> 50 * 10^18"""
    return int(amount) * 10**decimals


def airdrop_date(timestamp: int) -> str:
    """UTC date of the airdrop, used to name the reports folder"""
    date = datetime.datetime.fromtimestamp(timestamp, tz=datetime.timezone.utc)
    return date.strftime("%Y-%m-%d")


def create_conf(path: str) -> Config:
    """Generates the base config object from user input"""
    base_config = InputConfig.model_validate_json(Path(path).read_text())

    return Config(
        date=airdrop_date(base_config.airdrop_timestamp),
        **base_config.model_dump(),
    )


def load_conf(config_path: str) -> Config:
    """Loads an existing config from file"""
    return Config.model_validate_json(
        Path(f"{config_path}/epoch-conf.json").read_text()
    )


def main(path_to_config_file: Optional[str] = None) -> str:
    """Generates config file and saves in newly created directory with correct structure"""
    if not path_to_config_file:
        path_to_config_file = input(" Path to the config file ")
    conf = create_conf(path_to_config_file)

    # create directories
    epoch = conf.path
    Path(epoch).mkdir(parents=True, exist_ok=True)
    Path(f"{epoch}/csv/").mkdir(parents=True, exist_ok=True)
    Path(f"{epoch}/json/").mkdir(parents=True, exist_ok=True)

    # write new config file
    with open(f"{epoch}/epoch-conf.json", "w+") as j:
        j.write(json.dumps(conf.model_dump(), indent=4))

    print(f"😃 Created a new epoch folder {epoch}")

    return epoch
