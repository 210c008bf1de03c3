from staking_reporter.models import AirdropAmount, AirdropShare
from staking_reporter.rewards.shares import DENOMINATOR, ShareSnapshot


def airdrop_amount(share: int, total_airdrop: int) -> int:
    """Tokens (wei) for a share of `DENOMINATOR`, floored"""
    return share * total_airdrop // DENOMINATOR


def compute_shares(snapshot: ShareSnapshot) -> list[AirdropShare]:
    """
    Validated integer shares for every authorized account.
    Raises `ShareSumOutOfBoundsError` rather than returning shares that do not add up.
    """
    snapshot.check_shares_sum()
    return [
        AirdropShare(account=account, share=str(share))
        for account, share in snapshot.shares().items()
    ]


def compute_amounts(snapshot: ShareSnapshot, total_airdrop: int) -> list[AirdropAmount]:
    """Split `total_airdrop` between authorized accounts, leftovers from flooring are not distributed"""
    return [
        AirdropAmount(
            account=s.account,
            amount=str(airdrop_amount(int(s.share), total_airdrop)),
        )
        for s in compute_shares(snapshot)
    ]
