from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class PayMultiplier(str, Enum):
    DOUBLE = "双薪"
    TRIPLE = "三薪"

    @property
    def factor(self) -> int:
        return 2 if self is PayMultiplier.DOUBLE else 3


class SpecialDay(BaseModel):
    model_config = ConfigDict(frozen=True)

    pay: PayMultiplier
    festival: str  # e.g. "春节", "国庆"


class Cell(BaseModel):
    date_key: str  # YYYY-MM-DD
    day: int
    lunar: str  # e.g. "正月初一"
    special: Optional[SpecialDay] = None


class MonthPage(BaseModel):
    year: int
    month: int
    title: str  # "2 月"
    weekdays: List[str]
    cells: List[Optional[Cell]]


class MarksSummary(BaseModel):
    total: int
    special_marked: int


class MarksResponse(BaseModel):
    marks: Dict[str, bool]
    summary: MarksSummary


class ToggleResult(BaseModel):
    date_key: str
    marked: bool


class PayrollConfig(BaseModel):
    base_salary: float = Field(9000.0, gt=0, allow_inf_nan=False)
    target_days: int = Field(26, gt=0)


class MonthPayroll(BaseModel):
    year: int
    month: int
    base_salary: float
    target_days: int
    worked_days: int
    special_worked_days: int
    amount: float
    settled: bool
    eligible: bool
    remote_enabled: bool = True


class Settlement(BaseModel):
    id: Union[int, str]
    year: int
    month: int
    base_salary: float
    target_days: int
    worked_days: int
    amount: float
    settled_at: str
