from __future__ import annotations

from dataclasses import dataclass, field

from src.ledger.schemas import Position


@dataclass(frozen=True)
class NewPosition:
    """A position not yet persisted: no rowIndex, no computed fields."""
    ticker: str
    quantity: float
    cost_basis: float


@dataclass(frozen=True)
class Snapshot:
    positions: tuple[Position, ...] = ()
    total_value: float = 0.0


@dataclass(frozen=True)
class PositionShare:
    position: Position
    share: float        # market_value / total_value, 0 when total_value <= 0


@dataclass(frozen=True)
class PortfolioMetrics:
    total_value: float = 0.0
    total_cost: float = 0.0
    total_return: float = 0.0
    total_return_pct: float = 0.0   # ratio, not percent: 0.12 == 12%
    shares: list[PositionShare] = field(default_factory=list)
