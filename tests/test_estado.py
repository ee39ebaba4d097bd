import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from src.bot.handlers.estado import cmd_estado
from src.errors import RemoteError
from src.metrics import ledger_requests_total
from src.portfolio.controller import State, Status


def _make_update():
    update = MagicMock()
    update.message.reply_text = AsyncMock()
    return update


def _controller(state: State):
    c = MagicMock()
    c.busy = False
    c.state = state
    return c


@pytest.mark.asyncio
async def test_estado_unconfigured():
    update = _make_update()
    with patch("src.bot.session.controller", _controller(State())):
        await cmd_estado(update, MagicMock())
    assert "sin configurar" in update.message.reply_text.call_args[0][0]


@pytest.mark.asyncio
async def test_estado_reports_error_and_ledger_calls():
    ledger_requests_total.labels(action="read", result="ok").inc()
    update = _make_update()
    state = State(status=Status.ERROR, pending_error=RemoteError("Sheet not found"), error_action="read")
    with patch("src.bot.session.controller", _controller(state)):
        await cmd_estado(update, MagicMock())

    text = update.message.reply_text.call_args[0][0]
    assert "Sheet not found" in text
    assert "read x" in text
