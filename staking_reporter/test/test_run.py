"""
End to end runs on the sample events in `stubs/events/sample-events.json`, values in whole tokens.

Airdrop at 1644624000 (2022-02-12), 50 tokens held for 20 days to be authorized,
stake size averaged over the last 20 days.

- 0x9bc3: 100 since 2022-01-01 -> authorized, 42 days
- 0xfDe3: 60 on 2022-01-08 + 40 on 2022-01-15 -> authorized, 35 days
- 0x8BB4: staked 200 then removed everything -> not authorized
- 0x7Ac5: 500 but only 13 days before the airdrop -> not authorized
- 0xdeA7: 30, below the minimum -> not authorized

The average period is 38.5 days, so the two accounts are 3.5 days either side of it and get
bonuses of +0.5 and -0.5. Both held 100 tokens across the whole window, which leaves shares of
75% and 25% of the 1,000,000 airdropped tokens.
"""
import json
import os
import sys

import pytest

from staking_reporter import cli, config
from staking_reporter.errors import BadConfigException, UnknownAccountError
from staking_reporter.rewards import DENOMINATOR, hash_leaf, verify_proof
from staking_reporter.run import lookup_proof, run_shares, run_state
from staking_reporter.test.conftest import STUBS

EVENTS = f"{STUBS}/events/sample-events.json"
TOKEN = 10**18


@pytest.fixture
def epoch(monkeypatch, tmp_path) -> str:
    monkeypatch.chdir(tmp_path)
    return config.main(f"{STUBS}/config/input-conf.json")


def read_report(epoch: str, name: str):
    with open(f"{epoch}/json/{name}.json") as f:
        return json.load(f)


def test_run_state(epoch, ADDRESSES):
    ledger = run_state(epoch, source="file", events_file=EVENTS, token_values=True)

    authorized = read_report(epoch, "authorizedAccounts")
    assert authorized["snapshotBlockNumber"] == 11000000
    assert authorized["authorizedAmount"] == str(50 * TOKEN)
    assert authorized["authorizedPeriod"] == 1728000
    assert authorized["authorizedAccounts"] == [ADDRESSES[0], ADDRESSES[1]]

    balances = read_report(epoch, "authorizedAccountsStakeBalances")
    assert balances["authorizedAccountsStakeBalances"] == [
        {"account": ADDRESSES[0], "stakeBalance": str(100 * TOKEN)},
        {"account": ADDRESSES[1], "stakeBalance": str(100 * TOKEN)},
    ]

    deposits = read_report(epoch, "deposits")["accountsStakes"]
    assert set(deposits.keys()) == set(ADDRESSES)
    assert deposits[ADDRESSES[2]] == []
    assert deposits[ADDRESSES[1]] == [
        {"value": str(60 * TOKEN), "timestamp": 1641600000},
        {"value": str(40 * TOKEN), "timestamp": 1642204800},
    ]
    assert ledger.deposit_sum(ADDRESSES[3]) == 500 * TOKEN

    assert os.path.exists(f"{epoch}/csv/authorizedAccounts.csv")


def test_run_shares(epoch, ADDRESSES):
    alice, bob = ADDRESSES[:2]
    distribution = run_shares(epoch, source="file", events_file=EVENTS, token_values=True)

    shares = read_report(epoch, "airdrop_shares")
    assert shares == [
        {"account": alice, "share": str(DENOMINATOR * 3 // 4)},
        {"account": bob, "share": str(DENOMINATOR // 4)},
    ]

    results = read_report(epoch, "airdrop_results")
    assert results == [
        {"account": alice, "amount": str(750_000 * TOKEN)},
        {"account": bob, "amount": str(250_000 * TOKEN)},
    ]

    bonuses = read_report(epoch, "BonusesReport")
    assert bonuses["startTimestamp"] == 1640995200
    assert bonuses["airdropTimestamp"] == 1644624000
    assert bonuses["authorizedAccountsBonuses"] == [
        {"account": alice, "bonus": "0.5" + "0" * 63},
        {"account": bob, "bonus": "-0.5" + "0" * 63},
    ]

    full = read_report(epoch, "FullSharesReport")
    assert full["airdropChecks"]["sharesSum"] == str(DENOMINATOR)
    assert full["globalCalculationDetails"]["averageStakePeriod"] == "3326400." + "0" * 57
    bob_details = full["authorizedAccountsDetailedShares"][1]
    assert bob_details["stakes"] == [
        {"value": str(60 * TOKEN), "timestamp": 1641600000},
        {"value": str(40 * TOKEN), "timestamp": 1642204800},
    ]
    assert bob_details["unstakes"] == []
    assert bob_details["calculationDetails"]["period"] == 3024000

    # merkle distribution is written and every claim verifies
    with open(f"{epoch}/merkle-distribution.json") as f:
        written = json.load(f)
    assert written["merkleRoot"] == distribution.merkleRoot
    assert written["tokenTotal"] == str(1_000_000 * TOKEN)
    for account, claim in distribution.claims.items():
        leaf = hash_leaf(account, int(claim.amount))
        assert verify_proof(distribution.merkleRoot, leaf, claim.proof)

    with open(f"{epoch}/reporter-db.json") as f:
        db = json.load(f)
    assert set(db.keys()) == {"stats", "shares", "distribution"}


def test_lookup_proof(epoch, ADDRESSES):
    distribution = run_shares(epoch, source="file", events_file=EVENTS, token_values=True)

    claim = lookup_proof(epoch, ADDRESSES[1].lower())
    assert claim == distribution.claims[ADDRESSES[1]]

    with pytest.raises(UnknownAccountError):
        lookup_proof(epoch, ADDRESSES[2])


def test_cli_exits_on_fatal_error(monkeypatch, epoch, ADDRESSES, capsys):
    run_shares(epoch, source="file", events_file=EVENTS, token_values=True)
    monkeypatch.setattr(sys, "argv", ["cli", "proof", epoch, ADDRESSES[2]])

    with pytest.raises(SystemExit) as e:
        cli.main()

    assert e.value.code == 1
    assert "UnknownAccountError" in capsys.readouterr().out


def test_cli_proof(monkeypatch, epoch, ADDRESSES, capsys):
    distribution = run_shares(epoch, source="file", events_file=EVENTS, token_values=True)
    monkeypatch.setattr(sys, "argv", ["cli", "proof", epoch, ADDRESSES[0]])

    cli.main()

    out = capsys.readouterr().out
    assert f"amount: {750_000 * TOKEN}" in out
    for p in distribution.claims[ADDRESSES[0]].proof:
        assert p in out


def test_file_source_requires_a_file(epoch):
    with pytest.raises(BadConfigException, match="events_file"):
        run_state(epoch, source="file")
