import logging

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.ext import CallbackQueryHandler, ContextTypes, CommandHandler

from src.bot import session
from src.bot.audit import log_command
from src.errors import NotConfiguredError, ValidationError
from src.importer.parser import parse_amounts, parse_position_form
from src.portfolio.controller import State, Status
from src.utils.text import fmt_money, fmt_quantity

logger = logging.getLogger(__name__)


def mutation_reply(state: State, action: str, ok_msg: str) -> tuple[bool, str]:
    """Turn the state after a mutation into (success, reply text).

    A failed mutation leaves the snapshot as it was. A successful mutation
    followed by a failed refresh is still a success, with a warning.
    """
    if state.status != Status.ERROR:
        return True, f"✅ {ok_msg}"
    if state.error_action == action:
        return False, f"❌ Error: {state.pending_error}"
    return True, (
        f"✅ {ok_msg}\n"
        f"⚠️ No se pudo refrescar la cartera: {state.pending_error}\n"
        "Usa /refrescar para reintentar."
    )


async def cmd_alta(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Usage: /alta TICKER cantidad coste"""
    if not await session.guard(update, mutating=True):
        return
    raw_args = " ".join(context.args) if context.args else ""

    if len(context.args) < 3:
        await update.message.reply_text(
            "Uso: `/alta TICKER cantidad coste`\nEjemplo: `/alta AAPL 10 150.25`",
            parse_mode="Markdown",
        )
        return

    try:
        position = parse_position_form(*context.args[:3])
        state = await session.controller.add(position)
    except (ValidationError, NotConfiguredError) as e:
        err = str(e)
        await update.message.reply_text(f"❌ {err}")
        await log_command(update, "/alta", False, err, raw_args)
        return

    ok, text = mutation_reply(
        state, "add",
        f"Alta: {fmt_quantity(position.quantity)} {position.ticker} @ {fmt_money(position.cost_basis)}",
    )
    await update.message.reply_text(text)
    await log_command(update, "/alta", ok, text, raw_args)


async def cmd_editar(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Usage: /editar FILA cantidad coste. The ticker of a row cannot change."""
    if not await session.guard(update, mutating=True):
        return
    raw_args = " ".join(context.args) if context.args else ""

    if len(context.args) < 3:
        await update.message.reply_text(
            "Uso: `/editar FILA cantidad coste`\nLa fila es el `#` que muestra /cartera.",
            parse_mode="Markdown",
        )
        return

    controller = session.controller
    position = controller.find(context.args[0])
    if position is None:
        await update.message.reply_text(f"Fila {context.args[0]} no encontrada. Usa /cartera para ver las filas.")
        return

    try:
        quantity, cost_basis = parse_amounts(context.args[1], context.args[2])
        state = await controller.edit(position.row_index, quantity, cost_basis)
    except (ValidationError, NotConfiguredError) as e:
        err = str(e)
        await update.message.reply_text(f"❌ {err}")
        await log_command(update, "/editar", False, err, raw_args)
        return

    ok, text = mutation_reply(
        state, "update",
        f"Fila #{position.row_index} ({position.ticker}): "
        f"{fmt_quantity(quantity)} @ {fmt_money(cost_basis)}",
    )
    await update.message.reply_text(text)
    await log_command(update, "/editar", ok, text, raw_args)


async def cmd_borrar(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Usage: /borrar FILA. Asks for confirmation before deleting the row."""
    if not await session.guard(update, mutating=True):
        return
    if not context.args:
        await update.message.reply_text("Uso: `/borrar FILA`", parse_mode="Markdown")
        return

    position = session.controller.find(context.args[0])
    if position is None:
        await update.message.reply_text(f"Fila {context.args[0]} no encontrada. Usa /cartera para ver las filas.")
        return

    keyboard = InlineKeyboardMarkup([[
        InlineKeyboardButton("🗑 Eliminar", callback_data=f"delete:confirm:{position.row_index}"),
        InlineKeyboardButton("Cancelar", callback_data=f"delete:cancel:{position.row_index}"),
    ]])
    await update.message.reply_text(
        f"¿Eliminar {position.ticker} (fila #{position.row_index}, {fmt_quantity(position.quantity)} acc)?\n"
        "Se borrará la fila entera de la hoja.",
        reply_markup=keyboard,
    )


async def handle_delete_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = update.callback_query
    await query.answer()
    parts = query.data.split(":", 2)
    if len(parts) != 3 or parts[0] != "delete":
        return
    action, row_ref = parts[1], parts[2]

    if not session.is_allowed(update):
        await query.edit_message_text("⛔ No tienes acceso a este bot.")
        return
    if action == "cancel":
        await query.edit_message_text("Operación cancelada.")
        return
    if action != "confirm":
        return

    controller = session.controller
    if controller.busy:
        await query.edit_message_text("⏳ Hay una operación en curso, vuelve a intentarlo.")
        return

    position = controller.find(row_ref)
    if position is None:
        await query.edit_message_text(f"La fila {row_ref} ya no existe. Usa /cartera.")
        return

    try:
        state = await controller.delete(position.row_index)
    except NotConfiguredError as e:
        await query.edit_message_text(f"❌ {e}")
        return

    ok, text = mutation_reply(state, "delete", f"Eliminada fila #{position.row_index} ({position.ticker})")
    await query.edit_message_text(text)
    await log_command(update, "/borrar", ok, text, row_ref)


def get_handlers():
    return [
        CommandHandler("alta", cmd_alta),
        CommandHandler("editar", cmd_editar),
        CommandHandler("borrar", cmd_borrar),
        CallbackQueryHandler(handle_delete_callback, pattern="^delete:"),
    ]
