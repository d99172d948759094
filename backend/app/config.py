"""Application settings, read from the environment or a .env file."""

import json
from pathlib import Path
from typing import List, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

# Default SQLite location: <repo>/data/advance_tax.db
DEFAULT_DB_PATH = Path(__file__).parent.parent.parent / "data" / "advance_tax.db"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_TITLE: str = "Advance Tax Tracker"
    APP_VERSION: str = "0.1.0"

    DATABASE_URL: str = f"sqlite:///{DEFAULT_DB_PATH}"
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # Comma-separated ("http://a,http://b") or a JSON list
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    @property
    def cors_origins(self) -> List[str]:
        if self.CORS_ORIGINS.startswith("["):
            return json.loads(self.CORS_ORIGINS)
        return [i.strip() for i in self.CORS_ORIGINS.split(",") if i.strip()]


settings = Settings()
