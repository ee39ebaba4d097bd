"""Process-wide controller shared by every chat handler.

Handlers reach it as ``session.controller`` at call time so tests can patch
a single attribute.
"""
import logging

from telegram import Update

from src.config import app_config
from src.db.base import async_session_factory
from src.ledger.http import HttpLedgerClient
from src.portfolio.controller import PortfolioController
from src.store.config import ConfigStore

logger = logging.getLogger(__name__)


def _ledger_client(endpoint: str) -> HttpLedgerClient:
    timeout = app_config.get("ledger", {}).get("timeout_seconds")
    return HttpLedgerClient(endpoint, timeout=timeout)


controller = PortfolioController(ConfigStore(async_session_factory), client_factory=_ledger_client)


def is_allowed(update: Update) -> bool:
    allowed = app_config.get("bot", {}).get("allowed_tg_ids") or []
    if not allowed:
        return True
    user = update.effective_user
    return user is not None and user.id in allowed


async def guard(update: Update, mutating: bool = False) -> bool:
    """Reply and return False when the caller may not run the command now."""
    if not update.message:
        return False
    if not is_allowed(update):
        logger.warning(f"Rejected command from tg_id={update.effective_user.id}")
        await update.message.reply_text("⛔ No tienes acceso a este bot.")
        return False
    if mutating and controller.busy:
        await update.message.reply_text("⏳ Hay una operación en curso, espera a que termine.")
        return False
    return True
