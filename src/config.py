from __future__ import annotations
from typing import Any

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    telegram_apikey: str = ""
    database_url: str = "sqlite+aiosqlite:///sheetfolio.db"


def load_app_config(path: str = "config/config.yaml") -> dict[str, Any]:
    with open(path) as f:
        return yaml.safe_load(f) or {}


settings = Settings()
app_config = load_app_config()
