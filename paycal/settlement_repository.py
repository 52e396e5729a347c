import logging
from datetime import datetime, timezone
from typing import List

from supabase import Client

from schemas import Settlement
from paycal.errors import RemoteStoreError

logger = logging.getLogger(__name__)

TABLE = "salary_settlements"


class SettlementRepository:
    """
    salary_settlements table in Supabase.
    (year, month) is unique: settling the same month again replaces the row.
    """

    def __init__(self, client: Client):
        self.client = client

    def upsert_settlement(self, year: int, month: int, payload: dict) -> Settlement:
        row = {
            **payload,
            "year": year,
            "month": month,
            "settled_at": datetime.now(timezone.utc).isoformat(),
        }
        try:
            response = (
                self.client.table(TABLE)
                .upsert(row, on_conflict="year,month")
                .execute()
            )
        except Exception as e:
            logger.error("Settlement upsert %d-%02d failed: %s", year, month, e)
            raise RemoteStoreError(f"settlement save failed: {e}") from e

        if not response.data:
            raise RemoteStoreError(f"settlement save for {year}-{month:02d} returned no row")

        logger.info("Settled %d-%02d: %s", year, month, row.get("amount"))
        return Settlement(**response.data[0])

    def list_settlements(self, year: int) -> List[Settlement]:
        try:
            response = (
                self.client.table(TABLE)
                .select("*")
                .eq("year", year)
                .order("month")
                .execute()
            )
        except Exception as e:
            logger.error("Settlement list for %d failed: %s", year, e)
            raise RemoteStoreError(f"settlement list failed: {e}") from e

        return [Settlement(**r) for r in response.data or []]

    def settled_months(self, year: int) -> List[int]:
        return [s.month for s in self.list_settlements(year)]
