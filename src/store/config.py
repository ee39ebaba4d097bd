"""Durable home of the ledger endpoint.

The endpoint lives in a single ``app_settings`` row under a fixed key. A
missing or blank row means the bot is unconfigured.
"""
import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.db.models import AppSetting
from src.errors import ValidationError

logger = logging.getLogger(__name__)

ENDPOINT_KEY = "ledger_endpoint"


@dataclass(frozen=True)
class Config:
    endpoint: str


class ConfigStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get(self) -> Config | None:
        async with self.session_factory() as session:
            row = await session.get(AppSetting, ENDPOINT_KEY)
        if row is None or not row.value.strip():
            return None
        return Config(endpoint=row.value.strip())

    async def set(self, endpoint: str) -> Config:
        endpoint = (endpoint or "").strip()
        if not endpoint:
            raise ValidationError("Ledger endpoint must not be empty")

        async with self.session_factory() as session:
            row = await session.get(AppSetting, ENDPOINT_KEY)
            if row:
                row.value = endpoint
            else:
                session.add(AppSetting(key=ENDPOINT_KEY, value=endpoint))
            await session.commit()

        logger.info("Ledger endpoint updated")
        return Config(endpoint=endpoint)
