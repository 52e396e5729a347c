import logging
from typing import Optional
from urllib.parse import urlparse

from supabase import Client, create_client

logger = logging.getLogger(__name__)


def is_valid_supabase_url(url: Optional[str]) -> bool:
    if not url:
        return False
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def create_supabase_client(url: Optional[str], key: Optional[str]) -> Optional[Client]:
    """
    Supabase client, or None when SUPABASE_URL / SUPABASE_KEY are missing or the URL
    is not http(s). None means settlements run in local-only mode.
    """
    if not key or not is_valid_supabase_url(url):
        logger.info("Supabase not configured, remote settlements disabled")
        return None
    return create_client(url, key)


if __name__ == "__main__":
    from paycal import YEAR
    from paycal.config import get_settings
    from paycal.settlement_repository import SettlementRepository

    settings = get_settings()
    print("Supabase connection check")
    print("URL:", settings.supabase_url)

    client = create_supabase_client(settings.supabase_url, settings.supabase_key)
    if client is None:
        print("not configured")
    else:
        try:
            rows = SettlementRepository(client).list_settlements(YEAR)
            print("ok:", [r.model_dump() for r in rows])
        except Exception as e:
            print("error:", e)
