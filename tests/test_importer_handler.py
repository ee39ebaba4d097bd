"""Tests for CSV document uploads."""
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from src.bot.handlers.importer import cmd_importar, handle_csv_document
from src.errors import RemoteError, ValidationError
from src.portfolio.controller import State, Status
from src.portfolio.models import Snapshot


def _make_update(content: bytes, filename: str = "cartera.csv"):
    tg_file = MagicMock()
    tg_file.download_as_bytearray = AsyncMock(return_value=bytearray(content))

    progress = MagicMock()
    progress.edit_text = AsyncMock()

    update = MagicMock()
    update.effective_user.id = 100
    update.message.document.file_name = filename
    update.message.document.get_file = AsyncMock(return_value=tg_file)
    update.message.reply_text = AsyncMock(return_value=progress)
    return update, progress


def _make_controller(result=None, side_effect=None):
    c = MagicMock()
    c.busy = False
    c.import_csv = AsyncMock(return_value=result, side_effect=side_effect)
    return c


@pytest.mark.asyncio
async def test_import_passes_decoded_text_to_controller():
    update, progress = _make_update("\ufeffTicker,Quantity\nAAPL,10\n".encode("utf-8"))
    controller = _make_controller(result=(State(status=Status.READY, snapshot=Snapshot()), 1))

    with patch("src.bot.session.controller", controller), \
         patch("src.bot.handlers.importer.log_command", new_callable=AsyncMock) as log:
        await handle_csv_document(update, MagicMock())

    controller.import_csv.assert_awaited_once_with("Ticker,Quantity\nAAPL,10\n")
    text = progress.edit_text.call_args[0][0]
    assert "Importadas 1 posiciones" in text
    assert log.call_args[0][1:3] == ("/importar", True)


@pytest.mark.asyncio
async def test_import_without_valid_rows_is_reported_inline():
    update, progress = _make_update(b"foo\nbar")
    controller = _make_controller(side_effect=ValidationError("No valid positions found in CSV"))

    with patch("src.bot.session.controller", controller), \
         patch("src.bot.handlers.importer.log_command", new_callable=AsyncMock) as log:
        await handle_csv_document(update, MagicMock())

    assert "No se encontraron posiciones válidas" in progress.edit_text.call_args[0][0]
    assert log.call_args[0][2] is False


@pytest.mark.asyncio
async def test_import_rejected_by_ledger():
    update, progress = _make_update(b"AAPL,1,1")
    failed = State(status=Status.ERROR, pending_error=RemoteError("quota exceeded"), error_action="bulkAdd")
    controller = _make_controller(result=(failed, 1))

    with patch("src.bot.session.controller", controller), \
         patch("src.bot.handlers.importer.log_command", new_callable=AsyncMock):
        await handle_csv_document(update, MagicMock())

    assert "quota exceeded" in progress.edit_text.call_args[0][0]


@pytest.mark.asyncio
async def test_import_non_utf8_file():
    update, progress = _make_update(b"\xff\xfe\x00A")
    controller = _make_controller()

    with patch("src.bot.session.controller", controller), \
         patch("src.bot.handlers.importer.log_command", new_callable=AsyncMock):
        await handle_csv_document(update, MagicMock())

    controller.import_csv.assert_not_awaited()
    assert "UTF-8" in progress.edit_text.call_args[0][0]


@pytest.mark.asyncio
async def test_importar_explains_format():
    update = MagicMock()
    update.message.reply_text = AsyncMock()
    with patch("src.bot.session.controller", _make_controller()):
        await cmd_importar(update, MagicMock())
    text = update.message.reply_text.call_args[0][0]
    assert "Ticker,Quantity,Cost Basis" in text
