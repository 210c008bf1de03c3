import sys
from typing import Optional, Union

import fire

from staking_reporter import config
from staking_reporter.errors import (
    BadConfigException,
    LedgerInconsistencyError,
    MissingEnvironmentVariableException,
    NegativePeriodError,
    ProtocolViolationError,
    RetrievalFailureError,
    ShareSumOutOfBoundsError,
    UnknownAccountError,
)
from staking_reporter.run import lookup_proof, run_shares, run_state

FATAL_ERRORS = (
    BadConfigException,
    LedgerInconsistencyError,
    MissingEnvironmentVariableException,
    NegativePeriodError,
    ProtocolViolationError,
    RetrievalFailureError,
    ShareSumOutOfBoundsError,
    UnknownAccountError,
    FileNotFoundError,
)


def create(path_to_config_file: Optional[str] = None) -> str:
    """Create the epoch folder and config from an input JSON file"""
    return config.main(path_to_config_file)


def state(
    epoch_path: str,
    source: str = "rpc",
    events_file: Optional[str] = None,
    token_values: bool = False,
) -> None:
    """Save authorized accounts, their balances and deposits at the snapshot block"""
    run_state(epoch_path, source, events_file, token_values)  # type: ignore


def shares(
    epoch_path: str,
    source: str = "rpc",
    events_file: Optional[str] = None,
    token_values: bool = False,
) -> None:
    """Compute airdrop shares and amounts and build the merkle distribution"""
    distribution = run_shares(epoch_path, source, events_file, token_values)  # type: ignore
    print(
        f"✅ {len(distribution.claims)} claims, total {distribution.tokenTotal}, root {distribution.merkleRoot}"
    )


def as_address(value: Union[str, int]) -> str:
    """fire parses an unquoted 0x... argument as a hex integer"""
    if isinstance(value, int):
        return "0x" + format(value, "040x")
    return value


def proof(epoch_path: str, account: Union[str, int]) -> None:
    """Print the claimable amount and merkle proof of an account"""
    claim = lookup_proof(epoch_path, as_address(account))
    print(f"amount: {claim.amount}")
    print("proof:")
    for p in claim.proof:
        print(f"  {p}")


def main() -> None:
    try:
        fire.Fire(
            {
                "create": create,
                "state": state,
                "shares": shares,
                "proof": proof,
            }
        )
    except FATAL_ERRORS as e:
        print(f"❌ {type(e).__name__}: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
