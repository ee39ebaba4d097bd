"""Tests for /start and /endpoint."""
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from src.bot.handlers.endpoint import cmd_endpoint, cmd_start
from src.errors import ConnectivityError, ValidationError
from src.portfolio.controller import State, Status
from src.portfolio.models import Snapshot
from src.store.config import Config

URL = "https://script.google.com/macros/s/abc/exec"


def _make_update():
    update = MagicMock()
    update.effective_user.id = 100
    update.effective_user.first_name = "Ana"
    update.message.reply_text = AsyncMock()
    return update


def _make_context(args):
    ctx = MagicMock()
    ctx.args = args
    return ctx


def _make_controller(state: State, saved: State | None = None, side_effect=None):
    c = MagicMock()
    c.busy = False
    c.state = state
    c.save_config = AsyncMock(return_value=saved, side_effect=side_effect)
    return c


def _reply(update) -> str:
    return update.message.reply_text.call_args[0][0]


@pytest.mark.asyncio
async def test_start_unconfigured_points_to_endpoint():
    update = _make_update()
    with patch("src.bot.session.controller", _make_controller(State())):
        await cmd_start(update, _make_context([]))
    assert "/endpoint" in _reply(update)


@pytest.mark.asyncio
async def test_endpoint_without_args_shows_current():
    update = _make_update()
    state = State(status=Status.READY, config=Config(URL))
    with patch("src.bot.session.controller", _make_controller(state)):
        await cmd_endpoint(update, _make_context([]))
    assert URL in _reply(update)


@pytest.mark.asyncio
async def test_endpoint_saves_and_reports_positions():
    update = _make_update()
    saved = State(status=Status.READY, config=Config(URL), snapshot=Snapshot((), 0))
    controller = _make_controller(State(), saved=saved)

    with patch("src.bot.session.controller", controller), \
         patch("src.bot.handlers.endpoint.log_command", new_callable=AsyncMock) as log:
        await cmd_endpoint(update, _make_context([URL]))

    controller.save_config.assert_awaited_once_with(URL)
    assert "0 posiciones" in _reply(update)
    assert log.call_args[0][1:3] == ("/endpoint", True)


@pytest.mark.asyncio
async def test_endpoint_saved_but_unreachable():
    update = _make_update()
    saved = State(status=Status.ERROR, config=Config(URL),
                  pending_error=ConnectivityError("Could not reach ledger"), error_action="read")
    controller = _make_controller(State(), saved=saved)

    with patch("src.bot.session.controller", controller), \
         patch("src.bot.handlers.endpoint.log_command", new_callable=AsyncMock):
        await cmd_endpoint(update, _make_context([URL]))

    text = _reply(update)
    assert "guardado" in text
    assert "Could not reach ledger" in text


@pytest.mark.asyncio
async def test_endpoint_rejects_blank():
    update = _make_update()
    controller = _make_controller(State(), side_effect=ValidationError("Ledger endpoint must not be empty"))

    with patch("src.bot.session.controller", controller), \
         patch("src.bot.handlers.endpoint.log_command", new_callable=AsyncMock) as log:
        await cmd_endpoint(update, _make_context(["  "]))

    assert "❌" in _reply(update)
    assert log.call_args[0][2] is False
