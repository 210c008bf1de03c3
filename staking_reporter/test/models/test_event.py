import pytest
from pydantic import ValidationError

from staking_reporter.models import Deposit, EventKind, StakeEvent, StakePeriod, sort_events
from staking_reporter.test.conftest import stake, unstake


def test_account_is_checksummed(ADDRESSES):
    event = stake(ADDRESSES[0].lower(), 1, 1)
    assert event.account == ADDRESSES[0]


def test_unsupported_kind_is_rejected(ADDRESSES):
    with pytest.raises(ValidationError):
        StakeEvent(
            account=ADDRESSES[0],
            kind="Transfer",
            value=1,
            block_number=1,
            timestamp=1,
        )


def test_kind_from_event_name():
    assert EventKind("StakeAdded") == EventKind.STAKE_ADDED
    assert EventKind("StakeRemoved") == EventKind.STAKE_REMOVED


def test_sort_events(ADDRESSES):
    alice, bob = ADDRESSES[:2]
    events = [
        unstake(alice, 1, 20, block_number=7, log_index=1),
        stake(bob, 1, 20, block_number=7, log_index=0),
        stake(alice, 1, 10, block_number=5),
        stake(bob, 1, 20, block_number=6),
    ]

    assert [e.order_key for e in sort_events(events)] == [
        (10, 5, 0),
        (20, 6, 0),
        (20, 7, 0),
        (20, 7, 1),
    ]


def test_readable_deposit():
    readable = Deposit(value=10**30, timestamp=5).readable()
    assert readable.model_dump() == {"value": str(10**30), "timestamp": 5}


def test_stake_period_end():
    assert StakePeriod(value=1, from_timestamp=10).end(100) == 100
    assert StakePeriod(value=1, from_timestamp=10, duration=5, open=False).end(100) == 15
