from staking_reporter.models import EthereumAddress, Timestamp
from staking_reporter.staking.ledger import StakeLedger


def authorized_accounts(ledger: StakeLedger, cutoff: Timestamp) -> list[EthereumAddress]:
    """
    Accounts that held at least `auth_amount` since `cutoff - auth_period`.
    Sorted so that the result does not depend on the order accounts were first seen.
    """
    return sorted(a for a in ledger.accounts() if ledger.is_authorized(a, cutoff))
