import asyncio
import logging

from telegram.ext import Application

from src.config import settings, app_config
from src.bot import session
from src.bot.handlers.endpoint import get_handlers as endpoint_handlers
from src.bot.handlers.portfolio import get_handlers as portfolio_handlers
from src.bot.handlers.positions import get_handlers as position_handlers
from src.bot.handlers.importer import get_handlers as importer_handlers
from src.bot.handlers.estado import get_handlers as estado_handlers
from src.bot.handlers.help import get_handlers as help_handlers
from src.db.base import init_db
from src.metrics import start_metrics_server

logger = logging.getLogger(__name__)


def build_application() -> Application:
    if not settings.telegram_apikey:
        raise RuntimeError("TELEGRAM_APIKEY is not set (see .env)")

    app = Application.builder().token(settings.telegram_apikey).build()

    for get_handlers in (
        endpoint_handlers,
        portfolio_handlers,
        position_handlers,
        importer_handlers,
        estado_handlers,
        help_handlers,          # ← LAST: fallback catches unknown commands
    ):
        for handler in get_handlers():
            app.add_handler(handler)
    return app


async def run() -> None:
    metrics_port = app_config.get("metrics", {}).get("port", 9090)
    start_metrics_server(metrics_port)

    await init_db()
    app = build_application()

    state = await session.controller.start()
    logger.info(f"Ledger status at startup: {state.status.value}")

    async with app:
        await app.start()
        logger.info("Sheetfolio starting")
        await app.updater.start_polling(drop_pending_updates=True)
        try:
            await asyncio.sleep(float("inf"))
        except (KeyboardInterrupt, asyncio.CancelledError):
            pass
        finally:
            await app.updater.stop()
            await app.stop()
