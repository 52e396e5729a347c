from lunar_python import Solar


def lunar_text(year: int, month: int, day: int) -> str:
    """Chinese lunar month and day for a Gregorian date, e.g. 2026-02-17 -> "正月初一"."""
    lunar = Solar.fromYmd(year, month, day).getLunar()
    return f"{lunar.getMonthInChinese()}月{lunar.getDayInChinese()}"
