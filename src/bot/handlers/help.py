import logging

from telegram import Update
from telegram.ext import ContextTypes, CommandHandler, MessageHandler, filters

logger = logging.getLogger(__name__)

# (command, args_hint, description)
# Use "" for args_hint when command takes no arguments.
COMMAND_LIST = [
    # --- Configuración ---
    ("__header__", "", "🔧 *Configuración*"),
    ("start", "", "Bienvenida y estado de la configuración"),
    ("endpoint", "[url]", "Ver o guardar la URL del ledger (Web App de la hoja)"),

    # --- Cartera ---
    ("__header__", "", "💼 *Cartera*"),
    ("cartera", "", "Posiciones, valor, coste y rentabilidad"),
    ("refrescar", "", "Releer la hoja ahora"),

    # --- Posiciones ---
    ("__header__", "", "✏️ *Posiciones*"),
    ("alta", "TICKER cantidad coste", "Añadir una posición"),
    ("editar", "FILA cantidad coste", "Cambiar cantidad y coste de una fila"),
    ("borrar", "FILA", "Eliminar una fila (pide confirmación)"),

    # --- Importar ---
    ("__header__", "", "📥 *Importar*"),
    ("importar", "", "Formato CSV; envía el fichero .csv al chat"),

    # --- Admin ---
    ("__header__", "", "🛠 *Admin*"),
    ("estado", "", "Estado del ledger y llamadas desde el arranque"),
]


def _build_help_text() -> str:
    lines = [
        "📒 *Sheetfolio — Comandos disponibles*",
        "",
    ]
    for cmd, args, desc in COMMAND_LIST:
        if cmd == "__header__":
            lines += ["", desc]
        elif args:
            lines.append(f"`/{cmd} {args}` — {desc}")
        else:
            lines.append(f"`/{cmd}` — {desc}")
    return "\n".join(lines)


_HELP_TEXT = _build_help_text()


async def cmd_help(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not update.message:
        return
    await update.message.reply_text(_HELP_TEXT, parse_mode="Markdown")


async def cmd_unknown(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not update.message:
        return
    raw = update.message.text or ""
    token = raw.split()[0] if raw.split() else "desconocido"
    cmd = token.split("@")[0]  # strip @botname suffix for group chats
    await update.message.reply_text(
        f"❓ Comando no reconocido: `{cmd}`\n\n{_HELP_TEXT}",
        parse_mode="Markdown",
    )


def get_handlers():
    return [
        CommandHandler("help", cmd_help),
        MessageHandler(filters.COMMAND, cmd_unknown),
    ]
