class ProtocolViolationError(Exception):
    """Raise if an event is replayed out of order, twice, or is not a stake event"""

    pass


class LedgerInconsistencyError(Exception):
    """Raise if a removal exceeds the staked balance or a running value goes negative"""

    pass


class NegativePeriodError(Exception):
    """Raise if a stake period would close before it was opened"""

    pass


class UnknownAccountError(Exception):
    """Raise if an account is not present where one is required (eg: merkle proofs)"""

    pass


class ShareSumOutOfBoundsError(Exception):
    """Raise if the sum of all shares falls outside [DENOMINATOR * (1 - 1e-18), DENOMINATOR]"""

    pass


class RetrievalFailureError(Exception):
    """Raise if fetching events failed after all retries"""

    pass


class BadConfigException(Exception):
    pass


class MissingEnvironmentVariableException(Exception):
    pass
