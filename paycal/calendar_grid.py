import calendar
from datetime import date
from typing import List, Optional

from schemas import Cell, MonthPage
from paycal.lunar import lunar_text
from paycal.special_days import SpecialDayTable

WEEKDAYS = ["周一", "周二", "周三", "周四", "周五", "周六", "周日"]

GRID_SLOTS = 42  # 6 rows x 7 days


def pad2(n: int) -> str:
    return f"{n:02d}"


def date_key(year: int, month: int, day: int) -> str:
    return f"{year}-{pad2(month)}-{pad2(day)}"


def monday_first_index(d: date) -> int:
    """Mon -> 0 ... Sun -> 6"""
    # isoweekday(): Mon=1 .. Sun=7
    return d.isoweekday() - 1


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def build_month(
    year: int,
    month: int,
    special_days: Optional[SpecialDayTable] = None,
    fixed_rows: bool = True,
) -> List[Optional[Cell]]:
    """
    One calendar page, Monday first. Empty slots are None.
    Length is always a multiple of 7; with fixed_rows it is always 42.
    """
    if not 1 <= month <= 12:
        raise ValueError(f"month must be 1..12, got {month}")

    special_days = special_days or {}
    cells: List[Optional[Cell]] = []

    start_col = monday_first_index(date(year, month, 1))
    cells.extend([None] * start_col)

    for day in range(1, days_in_month(year, month) + 1):
        key = date_key(year, month, day)
        cells.append(
            Cell(
                date_key=key,
                day=day,
                lunar=lunar_text(year, month, day),
                special=special_days.get(key),
            )
        )

    while len(cells) % 7 != 0:
        cells.append(None)
    if fixed_rows:
        while len(cells) < GRID_SLOTS:
            cells.append(None)

    return cells


def month_title(month: int) -> str:
    return f"{month} 月"


def build_month_page(year: int, month: int, special_days: Optional[SpecialDayTable] = None) -> MonthPage:
    return MonthPage(
        year=year,
        month=month,
        title=month_title(month),
        weekdays=WEEKDAYS,
        cells=build_month(year, month, special_days),
    )
