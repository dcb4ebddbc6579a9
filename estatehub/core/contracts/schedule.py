"""Installment schedule computation for sales contracts.

Pure functions only: no database access, so the same schedule can be
computed inside the issuance transaction, for regeneration, or for a quote.
"""

from __future__ import annotations

import calendar
from datetime import date
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal

from pydantic import BaseModel

from estatehub.common.enums import PlanType

CENT = Decimal("0.01")


class ScheduledInstallment(BaseModel):
    installment_no: int
    due_date: date
    amount: Decimal


def add_months(anchor: date, months: int) -> date:
    """Shift ``anchor`` by whole calendar months, clamping to the month's last day."""
    month_index = anchor.month - 1 + months
    year = anchor.year + month_index // 12
    month = month_index % 12 + 1
    day = min(anchor.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def remaining_balance(
    total_amount: Decimal, down_payment: Decimal, discount: Decimal | None = None
) -> Decimal:
    return total_amount - down_payment - (discount or Decimal("0"))


def due_dates(anchor: date, periods: int, plan_type: PlanType) -> list[date]:
    step = PlanType(plan_type).months_per_period
    # Offsets are taken from the anchor each time so month-end clamping never accumulates
    return [add_months(anchor, i * step) for i in range(1, periods + 1)]


def build_schedule(
    anchor: date,
    total_amount: Decimal,
    down_payment: Decimal,
    periods: int,
    plan_type: PlanType,
    discount: Decimal | None = None,
    remainder_on_last: bool = False,
) -> list[ScheduledInstallment]:
    """Split the financed balance into ``periods`` installments.

    By default every installment carries the same amount (the quotient
    rounded half-up to cents), so the schedule total may drift from the
    balance by up to half a cent per installment. With
    ``remainder_on_last`` the quotient is floored to cents and the final
    installment absorbs the residue, making the total exact.
    """
    if periods < 1:
        raise ValueError("periods must be a positive integer")

    remaining = remaining_balance(total_amount, down_payment, discount)
    quotient = remaining / periods

    if remainder_on_last:
        amount = quotient.quantize(CENT, rounding=ROUND_DOWN)
        last_amount = remaining - amount * (periods - 1)
    else:
        amount = quotient.quantize(CENT, rounding=ROUND_HALF_UP)
        last_amount = amount

    schedule = []
    for number, due in enumerate(due_dates(anchor, periods, plan_type), start=1):
        schedule.append(
            ScheduledInstallment(
                installment_no=number,
                due_date=due,
                amount=last_amount if number == periods else amount,
            )
        )
    return schedule
