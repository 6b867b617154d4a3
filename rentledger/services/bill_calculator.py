"""Bill calculation: metered units and fixed fees into a period's charges."""

from decimal import Decimal
from typing import NamedTuple

from rentledger.services.money import ZERO, non_negative, round2, round_int, to_decimal


class BillBreakdown(NamedTuple):
    """Charge breakdown for one billing period."""

    water_bill: Decimal
    electricity_bill: Decimal
    sub_total: Decimal


def compute_bill(
    rent,
    water_unit,
    water_rate,
    electricity_unit,
    electricity_rate,
    addon_amount=ZERO,
) -> BillBreakdown:
    """Compute a period's charges.

    Formula:
        water_bill = round2(water_unit × water_rate)
        electricity_bill = round2(electricity_unit × electricity_rate)
        sub_total = round_int(rent + water_bill + electricity_bill + addon_amount)

    Pure and deterministic; callers invoke it again whenever an input changes.

    Args:
        rent: Rent for the period
        water_unit: Metered water units
        water_rate: Price per water unit
        electricity_unit: Metered electricity units
        electricity_rate: Price per electricity unit
        addon_amount: Flat extra fee (default 0)

    Returns:
        BillBreakdown with cents-rounded utility bills and whole-unit subtotal

    Raises:
        InvalidInput: If any input is negative or not a number
    """
    rent = non_negative(rent, "rent")
    water_unit = non_negative(water_unit, "water_unit")
    water_rate = non_negative(water_rate, "water_rate")
    electricity_unit = non_negative(electricity_unit, "electricity_unit")
    electricity_rate = non_negative(electricity_rate, "electricity_rate")
    addon_amount = non_negative(ZERO if addon_amount is None else addon_amount, "addon_amount")

    water_bill = round2(water_unit * water_rate)
    electricity_bill = round2(electricity_unit * electricity_rate)
    sub_total = round_int(rent + water_bill + electricity_bill + addon_amount)

    return BillBreakdown(
        water_bill=water_bill,
        electricity_bill=electricity_bill,
        sub_total=sub_total,
    )


def compute_net_amount(sub_total, penalty_total, previous_balance) -> Decimal:
    """Net amount due: sub_total + penalty_total + previous_balance, whole units."""
    return round_int(
        to_decimal(sub_total, "sub_total")
        + to_decimal(penalty_total, "penalty_total")
        + to_decimal(previous_balance, "previous_balance")
    )


__all__ = ["BillBreakdown", "compute_bill", "compute_net_amount"]
