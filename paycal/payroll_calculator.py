"""
Monthly settlement math.

amount = base_salary / target_days * worked_days, rounded to cents.
More worked days than the target gives more than base_salary; that is intended.
"""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Collection, Dict, Optional

from schemas import MonthPayroll, PayrollConfig
from paycal import YEAR
from paycal.errors import SettlementRejected
from paycal.special_days import SpecialDayTable

CENTS = Decimal("0.01")


def _year_month(key: str):
    try:
        d = datetime.strptime(key, "%Y-%m-%d")
    except ValueError:
        return None
    return d.year, d.month


def worked_days(marks: Dict[str, bool], month: int, year: int = YEAR) -> int:
    return sum(1 for key, marked in marks.items() if marked and _year_month(key) == (year, month))


def special_worked_days(
    marks: Dict[str, bool], month: int, special_days: SpecialDayTable, year: int = YEAR
) -> int:
    # reporting only, the multiplier does not enter the settlement amount
    return sum(
        1
        for key, marked in marks.items()
        if marked and key in special_days and _year_month(key) == (year, month)
    )


def settlement_amount(base_salary: float, target_days: int, days: int) -> float:
    daily = Decimal(str(base_salary)) / Decimal(target_days)
    return float((daily * days).quantize(CENTS, rounding=ROUND_HALF_UP))


def is_eligible(days: int, target_days: int, already_settled: bool) -> bool:
    return days >= target_days and not already_settled


def month_payroll(
    marks: Dict[str, bool],
    month: int,
    config: PayrollConfig,
    settled_months: Collection[int] = (),
    special_days: Optional[SpecialDayTable] = None,
    year: int = YEAR,
    remote_enabled: bool = True,
) -> MonthPayroll:
    days = worked_days(marks, month, year)
    settled = month in settled_months
    return MonthPayroll(
        year=year,
        month=month,
        base_salary=config.base_salary,
        target_days=config.target_days,
        worked_days=days,
        special_worked_days=special_worked_days(marks, month, special_days or {}, year),
        amount=settlement_amount(config.base_salary, config.target_days, days),
        settled=settled,
        eligible=remote_enabled and is_eligible(days, config.target_days, settled),
        remote_enabled=remote_enabled,
    )


def prepare_settlement(
    marks: Dict[str, bool], month: int, config: PayrollConfig, year: int = YEAR
) -> dict:
    """
    Re-check the marks at the moment of settling and build the row to upsert.
    Raises SettlementRejected below target_days.
    """
    if not 1 <= month <= 12:
        raise ValueError(f"month must be 1..12, got {month}")

    days = worked_days(marks, month, year)
    if days < config.target_days:
        raise SettlementRejected(
            f"{year}-{month:02d}: worked {days} days, need at least {config.target_days} to settle"
        )

    return {
        "year": year,
        "month": month,
        "base_salary": config.base_salary,
        "target_days": config.target_days,
        "worked_days": days,
        "amount": settlement_amount(config.base_salary, config.target_days, days),
    }
