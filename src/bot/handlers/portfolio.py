import logging
from datetime import datetime

from telegram import Update
from telegram.ext import ContextTypes, CommandHandler

from src.bot import session
from src.portfolio.controller import State, Status
from src.portfolio.models import PortfolioMetrics
from src.utils.text import escape_markdown, fmt_money, fmt_quantity, fmt_signed_pct, split_message

logger = logging.getLogger(__name__)

NOT_CONFIGURED_MSG = (
    "🔧 No hay ledger configurado.\n"
    "Usa `/endpoint <url>` con la URL de tu Web App de Google Apps Script."
)


def _arrow(value: float) -> str:
    return "📈" if value >= 0 else "📉"


def render_portfolio(state: State, metrics: PortfolioMetrics) -> str:
    if state.status == Status.UNCONFIGURED:
        return NOT_CONFIGURED_MSG

    lines = [f"📊 *Cartera* — {datetime.now().strftime('%d %b %Y %H:%M')}", ""]
    if state.status == Status.ERROR and state.pending_error is not None:
        lines += [f"⚠️ Último intento fallido ({state.error_action}): {escape_markdown(str(state.pending_error))}",
                  "Usa /refrescar para reintentar.", ""]

    positions = state.snapshot.positions
    if not positions:
        lines.append("Sin posiciones. Usa /alta o envía un CSV para importar.")
        return "\n".join(lines)

    lines += [
        f"💰 Valor actual: {fmt_money(metrics.total_value)}",
        f"💼 Coste total:  {fmt_money(metrics.total_cost)}",
        f"{_arrow(metrics.total_return)} Rentabilidad: {fmt_money(metrics.total_return)} "
        f"({fmt_signed_pct(metrics.total_return_pct)})",
        "", "─" * 33,
    ]
    for item in metrics.shares:
        p = item.position
        lines.append(f"#{escape_markdown(str(p.row_index))} *{escape_markdown(p.ticker)}* {escape_markdown(p.name)}")
        lines.append(
            f"    {fmt_quantity(p.quantity)} × {fmt_money(p.price)} = {fmt_money(p.market_value)}"
            f" ({item.share * 100:.1f}%)  {_arrow(p.change_pct)} {fmt_signed_pct(p.change_pct)} hoy"
            f" · P&L {fmt_money(p.total_return)}"
        )
    lines.append("─" * 33)
    return "\n".join(lines)


async def cmd_cartera(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await session.guard(update):
        return
    controller = session.controller
    text = render_portfolio(controller.state, controller.metrics())
    for chunk in split_message(text):
        await update.message.reply_text(chunk, parse_mode="Markdown")


async def cmd_refrescar(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await session.guard(update, mutating=True):
        return
    controller = session.controller
    if controller.state.status == Status.UNCONFIGURED:
        await update.message.reply_text(NOT_CONFIGURED_MSG, parse_mode="Markdown")
        return

    msg = await update.message.reply_text("⏳ Leyendo el ledger...")
    state = await controller.refresh()
    first, *rest = split_message(render_portfolio(state, controller.metrics()))
    await msg.edit_text(first, parse_mode="Markdown")
    for chunk in rest:
        await update.message.reply_text(chunk, parse_mode="Markdown")


def get_handlers():
    return [
        CommandHandler("cartera", cmd_cartera),
        CommandHandler("refrescar", cmd_refrescar),
    ]
