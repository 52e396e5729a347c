"""2026 wall calendar: holiday-pay days, attendance marks and monthly settlements."""

YEAR = 2026
