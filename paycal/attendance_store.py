import json
import logging
import math
from datetime import datetime, timezone
from typing import Dict, Optional, Union

from pydantic import ValidationError

from schemas import MarksSummary, PayrollConfig
from paycal import YEAR
from paycal.errors import ConfirmationRequired, InvalidDateKey, SnapshotImportError
from paycal.local_storage import LocalStorage
from paycal.special_days import SpecialDayTable

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1

Marks = Dict[str, bool]


def safe_parse_marks(text: Optional[str]) -> Marks:
    """Whatever is stored, give back a dict. Broken payloads become {}."""
    if not text:
        return {}
    try:
        value = json.loads(text)
    except json.JSONDecodeError:
        logger.warning("Stored marks are not valid JSON, starting empty")
        return {}
    if not isinstance(value, dict):
        logger.warning("Stored marks are not an object, starting empty")
        return {}
    return {str(k): bool(v) for k, v in value.items()}


class AttendanceStore:
    """Per-day attendance marks and the payroll config, both kept in LocalStorage."""

    def __init__(self, storage: LocalStorage, year: int = YEAR):
        self.storage = storage
        self.year = year

    @property
    def marks_key(self) -> str:
        return f"calendar-{self.year}-marks-v1"

    @property
    def base_salary_key(self) -> str:
        return f"calendar-{self.year}-base-salary"

    @property
    def target_days_key(self) -> str:
        return f"calendar-{self.year}-target-days"

    # 🔹 marks

    def load(self) -> Marks:
        return safe_parse_marks(self.storage.get_item(self.marks_key))

    def _save(self, marks: Marks) -> None:
        self.storage.set_item(self.marks_key, json.dumps(marks, ensure_ascii=False))

    def validate_key(self, key: str) -> str:
        try:
            d = datetime.strptime(key, "%Y-%m-%d").date()
        except ValueError:
            raise InvalidDateKey(f"not a YYYY-MM-DD date: {key!r}")
        if d.year != self.year or d.isoformat() != key:
            raise InvalidDateKey(f"{key} is not a date in {self.year}")
        return key

    def toggle(self, key: str) -> bool:
        self.validate_key(key)
        with self.storage.lock:
            marks = self.load()
            marks[key] = not marks.get(key, False)
            self._save(marks)
        return marks[key]

    def reset_all(self, confirm: bool = False) -> None:
        if not confirm:
            raise ConfirmationRequired("clearing all marks needs confirm=true")
        self._save({})
        logger.info("All marks for %d cleared", self.year)

    def summary(self, special_days: SpecialDayTable) -> MarksSummary:
        marks = self.load()
        marked = [k for k, v in marks.items() if v]
        return MarksSummary(
            total=len(marked),
            special_marked=sum(1 for k in marked if k in special_days),
        )

    # 🔹 export / import

    def export_snapshot(self, now: Optional[datetime] = None) -> dict:
        now = now or datetime.now(timezone.utc)
        return {
            "version": SNAPSHOT_VERSION,
            "year": self.year,
            "exportedAt": now.isoformat(),
            "marks": self.load(),
        }

    def export_filename(self, now: Optional[datetime] = None) -> str:
        """Dated by the UTC day of `now`, the same instant as exportedAt."""
        now = now or datetime.now(timezone.utc)
        return f"calendar-{self.year}-marks-{now.astimezone(timezone.utc).date().isoformat()}.json"

    def import_snapshot(self, raw: Union[str, bytes, dict]) -> Marks:
        """
        Replace all marks with the `marks` object of an exported file.
        Other fields are ignored. On any problem nothing is written.
        """
        if isinstance(raw, (str, bytes)):
            try:
                parsed = json.loads(raw)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise SnapshotImportError(f"invalid JSON: {e}")
        else:
            parsed = raw

        marks = parsed.get("marks") if isinstance(parsed, dict) else None
        if not isinstance(marks, dict):
            raise SnapshotImportError("file has no `marks` object")

        marks = {str(k): bool(v) for k, v in marks.items()}
        with self.storage.lock:
            self._save(marks)
        logger.info("Imported %d marks", len(marks))
        return marks

    # 🔹 payroll config

    def load_config(self) -> PayrollConfig:
        defaults = PayrollConfig()
        base_salary = self.storage.get_item(self.base_salary_key)
        target_days = self.storage.get_item(self.target_days_key)
        try:
            base_salary = float(base_salary) if base_salary is not None else defaults.base_salary
        except ValueError:
            base_salary = defaults.base_salary
        if not math.isfinite(base_salary):
            logger.warning("Stored base salary %r is not finite, using default", base_salary)
            base_salary = defaults.base_salary
        try:
            target_days = int(target_days) if target_days is not None else defaults.target_days
        except ValueError:
            target_days = defaults.target_days

        try:
            return PayrollConfig(base_salary=base_salary, target_days=target_days)
        except ValidationError:
            logger.warning("Stored payroll config is invalid, using defaults")
            return defaults

    def save_config(self, config: PayrollConfig) -> PayrollConfig:
        with self.storage.lock:
            self.storage.set_item(self.base_salary_key, str(config.base_salary))
            self.storage.set_item(self.target_days_key, str(config.target_days))
        return config
