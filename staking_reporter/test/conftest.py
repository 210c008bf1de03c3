import json
import os
from dataclasses import dataclass
from typing import Any

import pytest

from staking_reporter.config import load_conf
from staking_reporter.models import Config, EventKind, StakeEvent

STUBS = os.path.join(os.path.dirname(os.path.abspath(__file__)), "stubs")


@pytest.fixture
def config() -> Config:
    return load_conf(f"{STUBS}/config")


@pytest.fixture()
def ADDRESSES():
    return [
        "0x9bc33f6155eFAcc290c3C50E9B5b24b668562732",
        "0xfDe38ad4bBbeC867e6cb4Bb31FbFB2074c959A83",
        "0x8BB4C0b502f869af3B25166930507a6E8c3038D4",
        "0x7Ac54A0406FA2B465E0D57C66597BE83A4b149fC",
        "0xdeA708968f8dd520f5e2F0aB6785F28c98521ca8",
    ]


def event(
    account: str,
    kind: EventKind,
    value: int,
    timestamp: int,
    block_number: int = 0,
    log_index: int = 0,
) -> StakeEvent:
    return StakeEvent(
        account=account,
        kind=kind,
        value=value,
        # blocks follow time unless a test needs otherwise
        block_number=block_number or timestamp,
        timestamp=timestamp,
        log_index=log_index,
    )


def stake(account: str, value: int, timestamp: int, **kwargs) -> StakeEvent:
    return event(account, EventKind.STAKE_ADDED, value, timestamp, **kwargs)


def unstake(account: str, value: int, timestamp: int, **kwargs) -> StakeEvent:
    return event(account, EventKind.STAKE_REMOVED, value, timestamp, **kwargs)


@dataclass
class MockResponse:
    res: dict[str, Any]
    status_code: int = 200

    def json(self):
        return self.res

    def raise_for_status(self):
        if self.status_code >= 400:
            raise Exception(f"HTTP {self.status_code}")


def read_stub(name: str) -> Any:
    with open(f"{STUBS}/{name}") as j:
        return json.load(j)


LIVE_CALLS_DISABLED = os.environ.get("PYTEST_LIVE_CALLS_ENABLED") != "TRUE"
SKIP_REASON = (
    "API Calls disabled: set PYTEST_LIVE_CALLS_ENABLED=TRUE in .env to run this test"
)
