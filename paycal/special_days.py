"""
Holiday-pay table (双薪 / 三薪).

The dates are enumerated by hand for each year, not derived from any rule, so they
live in an editable JSON file next to this module. A different year's table can be
dropped in with PAYCAL_SPECIAL_DAYS_PATH.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Union

from pydantic import ValidationError

from schemas import SpecialDay
from paycal.errors import SpecialDayTableError

logger = logging.getLogger(__name__)

DEFAULT_TABLE_PATH = Path(__file__).with_name("special_days_2026.json")

SpecialDayTable = Mapping[str, SpecialDay]


def parse_special_days(raw: dict) -> SpecialDayTable:
    if not isinstance(raw, dict):
        raise SpecialDayTableError("special day table must be a JSON object")

    table = {}
    for key, value in raw.items():
        try:
            datetime.strptime(key, "%Y-%m-%d")
        except (TypeError, ValueError):
            raise SpecialDayTableError(f"invalid date key: {key!r}")
        try:
            table[key] = SpecialDay(**value)
        except (TypeError, ValidationError) as e:
            raise SpecialDayTableError(f"invalid entry for {key}: {e}")

    return MappingProxyType(dict(sorted(table.items())))


def load_special_days(path: Optional[Union[str, Path]] = None) -> SpecialDayTable:
    """Read the table from `path` (defaults to the bundled 2026 file)."""
    path = Path(path) if path else DEFAULT_TABLE_PATH
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise SpecialDayTableError(f"cannot read {path}: {e}")
    except json.JSONDecodeError as e:
        raise SpecialDayTableError(f"{path} is not valid JSON: {e}")

    table = parse_special_days(raw)
    logger.info("Loaded %d special days from %s", len(table), path)
    return table
