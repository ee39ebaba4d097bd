"""Turn user input into position records ready for the ledger.

CSV input is split naively on commas: quoting and escaping are not
supported, so a cell containing a comma will shift the columns after it.
"""
import logging
import math

from src.errors import ValidationError
from src.portfolio.models import NewPosition

logger = logging.getLogger(__name__)

HEADER_TICKER = "ticker"
HEADER_QUANTITY = "quantity"
HEADER_COST_BASIS = "cost basis"


def _parse_number(cell: str | None) -> float | None:
    if cell is None:
        return None
    try:
        value = float(cell.strip())
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _cell(cells: list[str], idx: int) -> str | None:
    return cells[idx] if idx < len(cells) else None


def parse_positions_csv(text: str) -> list[NewPosition]:
    """Parse ``ticker,quantity,cost basis`` rows.

    A first line naming any of the known columns is treated as a header and
    its indices are used; otherwise columns are positional and the first
    line is data. Rows need a ticker and a finite quantity; a missing or
    unparsable cost basis becomes 0.

    Raises:
        ValidationError: no row was usable.
    """
    lines = text.lstrip("\ufeff").splitlines()
    if not lines:
        raise ValidationError("No valid positions found in CSV")

    ticker_idx, qty_idx, cost_idx = 0, 1, 2
    headers = [h.strip() for h in lines[0].lower().split(",")]
    has_header = any(h in headers for h in (HEADER_TICKER, HEADER_QUANTITY, HEADER_COST_BASIS))
    if has_header:
        if HEADER_TICKER in headers:
            ticker_idx = headers.index(HEADER_TICKER)
        if HEADER_QUANTITY in headers:
            qty_idx = headers.index(HEADER_QUANTITY)
        if HEADER_COST_BASIS in headers:
            cost_idx = headers.index(HEADER_COST_BASIS)

    positions = []
    for line in lines[1:] if has_header else lines:
        cells = line.split(",")
        if len(cells) < 2:
            continue

        ticker = (_cell(cells, ticker_idx) or "").strip()
        quantity = _parse_number(_cell(cells, qty_idx))
        if not ticker or quantity is None:
            continue

        cost_basis = _parse_number(_cell(cells, cost_idx))
        positions.append(NewPosition(
            ticker=ticker.upper(),
            quantity=quantity,
            cost_basis=cost_basis if cost_basis is not None else 0.0,
        ))

    if not positions:
        raise ValidationError("No valid positions found in CSV")

    logger.debug(f"Parsed {len(positions)} positions from {len(lines)} CSV lines")
    return positions


def parse_amounts(quantity: str | None, cost_basis: str | None) -> tuple[float, float]:
    qty = _parse_number(quantity)
    if qty is None:
        raise ValidationError(f"Invalid quantity: {quantity!r}")
    cost = _parse_number(cost_basis)
    if cost is None:
        raise ValidationError(f"Invalid cost basis: {cost_basis!r}")
    return qty, cost


def parse_position_form(ticker: str | None, quantity: str | None, cost_basis: str | None) -> NewPosition:
    """Validate the fields of an add command: all three are required."""
    ticker = (ticker or "").strip()
    if not ticker:
        raise ValidationError("Ticker is required")
    qty, cost = parse_amounts(quantity, cost_basis)
    return NewPosition(ticker=ticker.upper(), quantity=qty, cost_basis=cost)
