from staking_reporter.staking import StakeLedger, authorized_accounts
from staking_reporter.test.conftest import stake, unstake


def test_authorized_accounts(ADDRESSES):
    alice, bob, carol, dave, erin = ADDRESSES
    ledger = StakeLedger(auth_amount=50, auth_period=1000)
    ledger.apply(
        [
            stake(erin, 50, 0),
            stake(alice, 30, 0),
            stake(alice, 20, 500),
            stake(bob, 49, 0),
            stake(carol, 100, 0),
            unstake(carol, 60, 100),
            stake(dave, 500, 1500),
        ]
    )

    # alice: 50 at the boundary, bob: below amount, carol: removed down to 40, dave: too recent
    assert authorized_accounts(ledger, 1500) == [alice, erin]
    assert authorized_accounts(ledger, 2500) == sorted([alice, dave, erin])


def test_authorized_accounts_do_not_depend_on_replay_order(ADDRESSES):
    first = StakeLedger(auth_amount=50, auth_period=100)
    second = StakeLedger(auth_amount=50, auth_period=100)

    first.apply([stake(a, 50, 0) for a in ADDRESSES])
    second.apply([stake(a, 50, 0) for a in reversed(ADDRESSES)])

    assert authorized_accounts(first, 100) == authorized_accounts(second, 100)
    assert authorized_accounts(first, 100) == sorted(ADDRESSES)


def test_no_accounts():
    assert authorized_accounts(StakeLedger(auth_amount=1, auth_period=1), 100) == []


def test_zero_amount_skips_emptied_accounts(ADDRESSES):
    alice, bob = ADDRESSES[:2]
    ledger = StakeLedger(auth_amount=0, auth_period=100)
    ledger.apply([stake(alice, 100, 0), stake(bob, 100, 0), unstake(bob, 100, 10)])

    assert not ledger.is_authorized(bob, 1000)
    assert authorized_accounts(ledger, 1000) == [alice]
