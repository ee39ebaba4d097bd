import logging

from telegram import Update
from telegram.ext import ContextTypes, CommandHandler

from src.bot import session
from src.bot.audit import log_command
from src.errors import ValidationError
from src.portfolio.controller import Status

logger = logging.getLogger(__name__)


async def cmd_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await session.guard(update):
        return
    tg_user = update.effective_user
    lines = [f"¡Hola {tg_user.first_name}! 📒 Llevo tu cartera sobre una hoja de cálculo."]
    if session.controller.state.config is None:
        lines.append("Primero configura el ledger: `/endpoint <url de tu Web App>`.")
    else:
        lines.append("Usa /cartera para ver tus posiciones o /help para ver todos los comandos.")
    await update.message.reply_text("\n".join(lines), parse_mode="Markdown")


async def cmd_endpoint(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Usage: /endpoint [url]: show or replace the ledger endpoint."""
    controller = session.controller

    if not context.args:
        if not await session.guard(update):
            return
        config = controller.state.config
        if config is None:
            await update.message.reply_text(
                "🔧 Sin endpoint configurado.\nUsa `/endpoint <url>` para guardar uno.",
                parse_mode="Markdown",
            )
        else:
            await update.message.reply_text(f"🔗 Endpoint actual:\n{config.endpoint}")
        return

    if not await session.guard(update, mutating=True):
        return
    endpoint = context.args[0]
    try:
        state = await controller.save_config(endpoint)
    except ValidationError as e:
        await update.message.reply_text(f"❌ {e}")
        await log_command(update, "/endpoint", False, str(e), endpoint)
        return

    if state.status == Status.ERROR:
        text = (
            "💾 Endpoint guardado, pero no se pudo leer el ledger:\n"
            f"{state.pending_error}\n"
            "Revisa la URL y tu conexión, y usa /refrescar."
        )
    else:
        text = f"✅ Endpoint guardado. {len(state.snapshot.positions)} posiciones cargadas."
    await update.message.reply_text(text)
    await log_command(update, "/endpoint", True, text, endpoint)


def get_handlers():
    return [
        CommandHandler("start", cmd_start),
        CommandHandler("endpoint", cmd_endpoint),
    ]
