import logging

from telegram import Update
from telegram.ext import ContextTypes, CommandHandler, MessageHandler, filters

from src.bot import session
from src.bot.audit import log_command
from src.bot.handlers.positions import mutation_reply
from src.errors import NotConfiguredError, ValidationError

logger = logging.getLogger(__name__)

IMPORT_HELP = (
    "📥 *Importar posiciones*\n\n"
    "Envía un fichero `.csv` a este chat. Formato:\n"
    "```\n"
    "Ticker,Quantity,Cost Basis\n"
    "AAPL,10,150\n"
    "MSFT,5,310.5\n"
    "```\n"
    "La cabecera es opcional (sin ella el orden es ticker, cantidad, coste).\n"
    "Las filas sin ticker o sin cantidad numérica se ignoran; un coste vacío cuenta como 0.\n"
    "Sin comillas: una celda no puede contener comas."
)


async def cmd_importar(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await session.guard(update):
        return
    await update.message.reply_text(IMPORT_HELP, parse_mode="Markdown")


async def handle_csv_document(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await session.guard(update, mutating=True):
        return
    document = update.message.document
    filename = document.file_name or "import.csv"

    msg = await update.message.reply_text(f"⏳ Leyendo {filename}...")
    tg_file = await document.get_file()
    raw = await tg_file.download_as_bytearray()
    try:
        text = bytes(raw).decode("utf-8-sig")
    except UnicodeDecodeError:
        err = "El fichero no está en UTF-8."
        await msg.edit_text(f"❌ {err}")
        await log_command(update, "/importar", False, err, filename)
        return

    try:
        state, count = await session.controller.import_csv(text)
    except ValidationError as e:
        err = f"No se encontraron posiciones válidas en el CSV ({e})."
        await msg.edit_text(f"❌ {err}")
        await log_command(update, "/importar", False, err, filename)
        return
    except NotConfiguredError as e:
        await msg.edit_text(f"❌ {e}")
        await log_command(update, "/importar", False, str(e), filename)
        return

    ok, text = mutation_reply(state, "bulkAdd", f"Importadas {count} posiciones desde {filename}")
    await msg.edit_text(text)
    await log_command(update, "/importar", ok, text, filename)


def get_handlers():
    return [
        CommandHandler("importar", cmd_importar),
        MessageHandler(filters.Document.FileExtension("csv"), handle_csv_document),
    ]
