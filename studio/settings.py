import os
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


class Settings:
    APP_VERSION: str = "0.4.0"
    REFERENCE_VERSION: str = "lasbi-18-2025.1"
    SCHEMA_VERSION: str = "v1-assessment-snapshot"

    # --- CONFIG ---
    ENV = os.getenv("STUDIO_ENV", "production")
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./studio.db")
    SQL_ECHO = os.getenv("SQL_ECHO", "0") == "1"
    # empty -> bundled studio/data
    DATA_DIR = os.getenv("STUDIO_DATA_DIR", "")
    ADMIN_KEY = os.getenv("STUDIO_ADMIN_KEY", "change-me")

    # --- LIMITS ---
    MAX_SCORES_PER_REQUEST = 200
    MAX_ITEMS_PER_REQUEST = 1000
    MAX_LIST_LIMIT = 200

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"


@lru_cache
def get_settings():
    return Settings()
