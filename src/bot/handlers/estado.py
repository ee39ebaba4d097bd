import logging

from telegram import Update
from telegram.ext import ContextTypes, CommandHandler

from prometheus_client import REGISTRY

from src.bot import session
from src.portfolio.controller import Status
from src.utils.text import escape_markdown

logger = logging.getLogger(__name__)

_STATUS_LABELS = {
    Status.UNCONFIGURED: "🔧 sin configurar",
    Status.LOADING: "⏳ cargando",
    Status.READY: "🟢 listo",
    Status.ERROR: "🔴 error",
}


def _get_float(name: str, labels: dict | None = None) -> float:
    v = REGISTRY.get_sample_value(name, labels or {})
    return float(v) if v is not None else 0.0


def _ledger_breakdown() -> tuple[dict[str, int], dict[str, int]]:
    """Return ({action: ok_count}, {result: count}) for ledger calls."""
    by_action: dict[str, int] = {}
    by_result: dict[str, int] = {}
    for mf in REGISTRY.collect():
        if mf.name != "sheetfolio_ledger_requests":
            continue
        for sample in mf.samples:
            if sample.name != "sheetfolio_ledger_requests_total" or sample.value <= 0:
                continue
            count = int(sample.value)
            result = sample.labels["result"]
            by_result[result] = by_result.get(result, 0) + count
            if result == "ok":
                by_action[sample.labels["action"]] = count
    return by_action, by_result


async def cmd_estado(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Show controller status and ledger metrics since last bot restart."""
    if not await session.guard(update):
        return

    state = session.controller.state
    by_action, by_result = _ledger_breakdown()
    imported = int(_get_float("sheetfolio_positions_imported_total"))

    lines = ["📊 *Sheetfolio — estado*", ""]
    lines.append(f"Ledger: {_STATUS_LABELS[state.status]}")
    if state.status != Status.UNCONFIGURED:
        lines.append(
            f"📒 {len(state.snapshot.positions)} posiciones · valor {state.snapshot.total_value:,.2f}"
        )
    if state.pending_error is not None:
        lines.append(f"⚠️ Último error ({state.error_action}): {escape_markdown(str(state.pending_error))}")

    if by_result:
        ok = by_result.get("ok", 0)
        remote = by_result.get("remote_error", 0)
        conn = by_result.get("connectivity_error", 0)
        lines.append(f"🔄 Llamadas: {ok} ok · {remote} rechazadas · {conn} sin conexión")
        detail = " · ".join(f"{a} x{n}" for a, n in sorted(by_action.items(), key=lambda x: -x[1]))
        if detail:
            lines.append(f"📋 {detail}")
    else:
        lines.append("🔄 Llamadas: ninguna aún")

    if imported:
        lines.append(f"📥 Posiciones importadas por CSV: {imported}")

    lines += ["", "_Contadores desde el último arranque._"]
    await update.message.reply_text("\n".join(lines), parse_mode="Markdown")


def get_handlers():
    return [CommandHandler("estado", cmd_estado)]
