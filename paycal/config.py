import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# .env file -> environment variables
load_dotenv()

DEFAULT_STORAGE_PATH = ".paycal/storage.json"


@dataclass(frozen=True)
class Settings:
    supabase_url: Optional[str]
    supabase_key: Optional[str]
    storage_path: str
    special_days_path: Optional[str]


def get_settings() -> Settings:
    return Settings(
        supabase_url=os.getenv("SUPABASE_URL") or None,
        supabase_key=os.getenv("SUPABASE_KEY") or None,
        storage_path=os.getenv("PAYCAL_STORAGE_PATH", DEFAULT_STORAGE_PATH),
        special_days_path=os.getenv("PAYCAL_SPECIAL_DAYS_PATH") or None,
    )
