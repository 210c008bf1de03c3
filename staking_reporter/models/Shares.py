from __future__ import annotations
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Union

from pydantic import BaseModel

from staking_reporter.models.types import BigNumber, EthereumAddress


# digits printed in the reports
REPORT_DIGITS = 64


def fixed_decimal(value: Decimal, places: int = REPORT_DIGITS) -> str:
    """Exactly `places` digits after the point, rounded half up"""
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + places + 2)
        ctx.rounding = ROUND_HALF_UP
        return format(value.quantize(Decimal(f"1e-{places}")), "f")


def precision_decimal(value: Decimal, digits: int = REPORT_DIGITS) -> str:
    """
    Exactly `digits` significant digits, rounded half up.
    Very large or very small values switch to exponent notation, written as `1.5e-7`.
    """
    with localcontext() as ctx:
        ctx.prec = digits
        ctx.rounding = ROUND_HALF_UP
        rounded = +value

    exponent = rounded.adjusted()
    if exponent >= digits or exponent <= -7:
        mantissa, exp = format(rounded, f".{digits - 1}e").split("e")
        return f"{mantissa}e{int(exp):+d}"
    return format(rounded, f".{digits - 1 - exponent}f")


class AccountShareDetails(BaseModel):
    """
    Every intermediate value used to compute the share of an authorized account
    :param `period`: seconds from the oldest surviving deposit to the airdrop
    :param `deviation`: `period` minus the average period of all authorized accounts, can be negative
    :param `bonus`: deviation over the sum of absolute deviations, in [-1, 1]
    :param `share`: integer share out of `DENOMINATOR`
    """

    period: int
    average_stake: Decimal
    deviation: Decimal
    bonus: Decimal
    stake_with_bonus: Decimal
    share: int

    def readable(self) -> dict[str, Union[str, int]]:
        return {
            "period": self.period,
            "averageStake": precision_decimal(self.average_stake),
            "deviation": precision_decimal(self.deviation),
            "bonus": precision_decimal(self.bonus),
            "stakeWithBonus": precision_decimal(self.stake_with_bonus),
            "share": str(self.share),
        }


class GlobalShareDetails(BaseModel):
    """Aggregates shared by every account of a snapshot"""

    shares_denominator: int
    average_stake_period: Decimal
    deviations_absolute_sum: Decimal
    stake_with_bonus_sum: Decimal

    def readable(self) -> dict[str, str]:
        return {
            "sharesDenominator": str(self.shares_denominator),
            "averageStakePeriod": precision_decimal(self.average_stake_period),
            "deviationsAbsoluteSum": precision_decimal(self.deviations_absolute_sum),
            "stakeWithBonusSum": precision_decimal(self.stake_with_bonus_sum),
        }


class AirdropShare(BaseModel):
    account: EthereumAddress
    share: BigNumber


class AirdropAmount(BaseModel):
    """Merkle leaf input: the amount of airdropped tokens (wei) an account can claim"""

    account: EthereumAddress
    amount: BigNumber
