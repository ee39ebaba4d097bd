"""Portfolio metrics derived from a ledger snapshot.

Everything here is recomputed from the snapshot on every call; nothing is
cached between snapshots.
"""
from src.ledger.schemas import Position
from src.portfolio.models import PortfolioMetrics, PositionShare, Snapshot


def total_cost(snapshot: Snapshot) -> float:
    return sum((p.quantity * p.cost_basis for p in snapshot.positions), 0.0)


def total_return(snapshot: Snapshot) -> float:
    return snapshot.total_value - total_cost(snapshot)


def total_return_pct(snapshot: Snapshot) -> float:
    cost = total_cost(snapshot)
    if cost <= 0:
        return 0.0
    return (snapshot.total_value - cost) / cost


def position_share(position: Position, total_value: float) -> float:
    if total_value <= 0:
        return 0.0
    return position.market_value / total_value


def summarize(snapshot: Snapshot) -> PortfolioMetrics:
    cost = total_cost(snapshot)
    ret = snapshot.total_value - cost
    return PortfolioMetrics(
        total_value=snapshot.total_value,
        total_cost=cost,
        total_return=ret,
        total_return_pct=(ret / cost) if cost > 0 else 0.0,
        shares=[
            PositionShare(position=p, share=position_share(p, snapshot.total_value))
            for p in snapshot.positions
        ],
    )
