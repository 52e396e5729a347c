from datetime import date

import pytest

from schemas import PayMultiplier
from paycal.calendar_grid import (
    WEEKDAYS,
    build_month,
    build_month_page,
    date_key,
    days_in_month,
    monday_first_index,
)


@pytest.mark.parametrize("month", range(1, 13))
@pytest.mark.parametrize("fixed_rows", [True, False])
def test_grid_is_whole_weeks_with_every_day(month, fixed_rows, special_days):
    cells = build_month(2026, month, special_days, fixed_rows=fixed_rows)

    assert len(cells) % 7 == 0
    days = [c for c in cells if c is not None]
    assert len(days) == days_in_month(2026, month)
    assert [c.day for c in days] == list(range(1, len(days) + 1))


def test_fixed_rows_always_pads_to_42():
    assert len(build_month(2026, 2)) == 42
    assert len(build_month(2026, 2, fixed_rows=False)) == 35


def test_leading_blanks_follow_monday_first_weekday():
    # 2026-02-01 is a Sunday, 2026-06-01 a Monday
    feb = build_month(2026, 2)
    assert feb[:6] == [None] * 6
    assert feb[6].date_key == "2026-02-01"

    jun = build_month(2026, 6)
    assert jun[0].date_key == "2026-06-01"


def test_monday_first_index():
    assert monday_first_index(date(2026, 6, 1)) == 0
    assert monday_first_index(date(2026, 2, 1)) == 6
    assert monday_first_index(date(2026, 1, 1)) == 3


def test_february_spring_festival_is_triple_pay(special_days):
    cells = [c for c in build_month(2026, 2, special_days) if c is not None]
    specials = {c.date_key: c.special for c in cells if c.special is not None}

    assert sorted(specials) == ["2026-02-16", "2026-02-17", "2026-02-18", "2026-02-19"]
    assert all(s.pay is PayMultiplier.TRIPLE for s in specials.values())
    assert all(s.festival == "春节" for s in specials.values())


def test_every_table_entry_lands_on_its_cell_only(special_days):
    for key, special in special_days.items():
        year, month, _ = map(int, key.split("-"))
        cells = [c for c in build_month(year, month, special_days) if c is not None]
        tagged = [c for c in cells if c.special is not None]
        matching = [c for c in cells if c.date_key == key]

        assert matching[0].special == special
        assert {c.date_key for c in tagged} == {k for k in special_days if k.startswith(key[:7])}


def test_without_table_nothing_is_special():
    assert all(c is None or c.special is None for c in build_month(2026, 10))


def test_build_month_is_deterministic(special_days):
    assert build_month(2026, 10, special_days) == build_month(2026, 10, special_days)


@pytest.mark.parametrize("month", [0, 13])
def test_month_out_of_range(month):
    with pytest.raises(ValueError):
        build_month(2026, month)


def test_date_key_zero_pads():
    assert date_key(2026, 3, 7) == "2026-03-07"


def test_month_page():
    page = build_month_page(2026, 10)
    assert page.title == "10 月"
    assert page.weekdays == WEEKDAYS
    assert page.weekdays[0] == "周一"


def test_every_cell_carries_lunar_text():
    cells = [c for c in build_month(2026, 2) if c is not None]
    assert all(c.lunar for c in cells)
    assert next(c for c in cells if c.day == 17).lunar == "正月初一"
